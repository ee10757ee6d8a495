"""Test module for structural_xml_binder package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import structural_xml_binder

    # Assert
    assert structural_xml_binder is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import structural_xml_binder

    # Assert
    assert isinstance(structural_xml_binder.__version__, str)
    assert structural_xml_binder.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import structural_xml_binder

    # Assert
    assert structural_xml_binder.__author__ == "Structural XML Binder Team"


def test_package_all_exports_resolve() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import structural_xml_binder

    # Assert
    missing = [
        name for name in structural_xml_binder.__all__
        if not hasattr(structural_xml_binder, name)
    ]
    assert missing == []


def test_top_level_bind() -> None:
    """Test the simplest entry point works from the package root."""
    # Arrange
    from structural_xml_binder import bind

    class Item:
        def setName(self, value: str) -> None:
            self.name = value

    # Act
    item = bind("<item><name>a</name></item>", Item)

    # Assert
    assert item.name == "a"
