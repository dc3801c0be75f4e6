import os
from pathlib import Path

import pytest


class FakeDevTree:
    """A /dev lookalike with device files and by-id symlinks"""

    def __init__(self, root: Path):
        self.dev_dir = root / "dev"
        self.by_id_dir = self.dev_dir / "disk" / "by-id"
        self.by_id_dir.mkdir(parents=True)

    def add_device(self, name: str, *aliases: str) -> None:
        device = self.dev_dir / name
        if not device.exists():
            device.touch()
        for alias in aliases:
            os.symlink(os.path.join("..", "..", name), self.by_id_dir / alias)

    def id_path(self, alias: str) -> str:
        return str(self.by_id_dir / alias)


@pytest.fixture
def dev_tree(tmp_path: Path) -> FakeDevTree:
    return FakeDevTree(tmp_path)


@pytest.fixture
def symlink_dir(tmp_path: Path) -> Path:
    path = tmp_path / "local-storage"
    path.mkdir()
    return path
