# thirdpartylib
import pytest
# projectlib
from pv_energy_forecasting.utils.paths import validate_address


def test_read_requires_existing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        validate_address(tmp_path / "energia.csv")


def test_extension_is_enforced(tmp_path):
    path = validate_address(tmp_path / "stl", extension=".png", mode="w")
    assert path == tmp_path / "stl.png"


def test_write_does_not_overwrite(tmp_path):
    existing = tmp_path / "stl.png"
    existing.write_bytes(b"")
    path = validate_address(existing, extension=".png", mode="w")
    assert path != existing
    assert path.stem.startswith("stl_")


def test_missing_parent_directory(tmp_path):
    with pytest.raises(NotADirectoryError):
        validate_address(tmp_path / "missing" / "energia.csv", mode="w")


def test_mkdir_creates_output_directory(tmp_path):
    out = validate_address(tmp_path / "outputs" / "figures", mkdir=True)
    assert out.is_dir()
