import pytest

from linkshelf.errors import InvalidReference, NotFound
from linkshelf.records import Folder
from linkshelf.services.folders import FolderTree


def _tree():
    return FolderTree(
        [
            Folder(id=1, user_id=1, name="Work"),
            Folder(id=2, user_id=1, name="Reading", parent_id=1),
            Folder(id=3, user_id=1, name="Papers", parent_id=2),
            Folder(id=4, user_id=1, name="Home"),
            Folder(id=5, user_id=2, name="Other user"),
            Folder(id=6, user_id=1, name="Tools", parent_id=1),
        ]
    )


def test_children_of_roots_keeps_insertion_order():
    tree = _tree()

    assert [f.name for f in tree.children_of(1)] == ["Work", "Home"]
    assert [f.name for f in tree.children_of(1, 1)] == ["Reading", "Tools"]
    assert tree.children_of(1, 3) == []


def test_path_to_runs_root_to_leaf():
    tree = _tree()

    assert [f.id for f in tree.path_to(3)] == [1, 2, 3]
    assert [f.id for f in tree.path_to(4)] == [4]


def test_path_to_unknown_folder_raises_not_found():
    with pytest.raises(NotFound):
        _tree().path_to(99)


def test_is_descendant():
    tree = _tree()

    assert tree.is_descendant(3, 1)
    assert tree.is_descendant(3, 3)
    assert not tree.is_descendant(1, 3)
    assert not tree.is_descendant(4, 1)


def test_validate_parent_rejects_missing_and_foreign_parents():
    tree = _tree()

    tree.validate_parent(1, None)
    tree.validate_parent(1, 2)
    with pytest.raises(InvalidReference):
        tree.validate_parent(1, 99)
    with pytest.raises(InvalidReference):
        tree.validate_parent(1, 5)
