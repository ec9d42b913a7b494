"""Test module for xml2json_transcoder package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xml2json_transcoder

    # Assert
    assert xml2json_transcoder is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import xml2json_transcoder

    # Assert
    assert isinstance(xml2json_transcoder.__version__, str)
    assert xml2json_transcoder.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import xml2json_transcoder

    # Assert
    assert xml2json_transcoder.__author__ == "XML2JSON Transcoder Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import xml2json_transcoder

    # Assert
    for name in xml2json_transcoder.__all__:
        assert hasattr(xml2json_transcoder, name), name
    assert {"convert", "Converter", "ConverterConfig", "Decoder", "Encoder"} <= set(
        xml2json_transcoder.__all__
    )
