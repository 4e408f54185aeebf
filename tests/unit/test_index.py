"""Tests for the tree index: reachability and the unused-item query."""

from notetree.core.tree.index import TreeIndex, get_unused_items
from notetree.models.note import Note


def _ids(notes: list[Note]) -> list[str]:
    return [n.id for n in notes]


def test_unused_items_are_the_unreachable_notes(index: TreeIndex) -> None:
    assert _ids(get_unused_items(index)) == ["a", "b", "c"]


def test_unused_items_exclude_reachable_notes(index: TreeIndex) -> None:
    unused = set(_ids(index.get_unused_items()))
    assert unused.isdisjoint({"work", "home", "plan"})
    assert index.reachable_ids() == {"work", "home", "plan"}


def test_detaching_a_parent_puts_its_subtree_in_the_trash() -> None:
    """{root: [A], A: [B]} with A's pid cleared -> both A and B are unused."""
    tree = TreeIndex([Note(id="A", pid="root"), Note(id="B", pid="A")])
    assert tree.get_unused_items() == []

    tree.replace([Note(id="A", pid=None), Note(id="B", pid="A")])

    assert _ids(tree.get_unused_items()) == ["A", "B"]


def test_unused_items_is_stable_without_mutation(index: TreeIndex) -> None:
    assert index.get_unused_items() == index.get_unused_items()


def test_cycle_among_orphans_terminates_and_both_are_unused() -> None:
    tree = TreeIndex(
        [
            Note(id="x", pid="y"),
            Note(id="y", pid="x"),
            Note(id="self", pid="self"),
            Note(id="ok", pid="root"),
        ]
    )
    assert _ids(tree.get_unused_items()) == ["x", "y", "self"]
    assert tree.is_reachable("ok")


def test_restore_item_reattaches_note_and_subtree(index: TreeIndex) -> None:
    index.restore_item("a", "root")

    assert index.get("a") == Note(id="a", title="Archive", raw_content="old stuff", pid="root")
    assert index.is_reachable("a")
    assert index.is_reachable("b")
    assert _ids(index.get_unused_items()) == ["c"]


def test_restore_item_unknown_id_is_a_noop(index: TreeIndex) -> None:
    version = index.version
    index.restore_item("missing", "root")
    assert index.version == version
    assert "missing" not in index


def test_mutation_invalidates_cached_unused_items(index: TreeIndex) -> None:
    before = index.get_unused_items()
    version = index.version

    index.restore_item("c", "home")

    assert index.version == version + 1
    assert index.get_unused_items() != before
    assert index.children("home") == ("c",)


def test_children_are_derived_in_index_order(index: TreeIndex) -> None:
    assert index.children("root") == ("work", "home")
    assert index.children("work") == ("plan",)
    assert index.children("plan") == ()


def test_live_notes_in_index_order(index: TreeIndex) -> None:
    assert _ids(index.live_notes()) == ["work", "home", "plan"]


def test_replace_keeps_last_duplicate_and_ignores_root_record() -> None:
    tree = TreeIndex(
        [
            Note(id="n", title="first", pid="root"),
            Note(id="root", title="sentinel"),
            Note(id="n", title="second", pid="root"),
        ]
    )
    assert len(tree) == 1
    note = tree.get("n")
    assert note is not None
    assert note.title == "second"


def test_iteration_yields_records_in_index_order(index: TreeIndex) -> None:
    assert [n.id for n in index] == ["work", "home", "plan", "a", "b", "c"]
    assert len(index.notes) == 6


def test_server_child_lists_decide_reachability() -> None:
    # "A" still names the root, but the root's child list dropped it.
    tree = TreeIndex(
        [Note(id="A", pid="root"), Note(id="B", pid="A")],
        children={"root": [], "A": ["B"]},
    )
    assert [n.id for n in tree.get_unused_items()] == ["A", "B"]


def test_restore_item_relists_note_under_new_parent() -> None:
    tree = TreeIndex(
        [Note(id="P", pid="root"), Note(id="A", pid="P"), Note(id="B", pid="A")],
        children={"root": ["P"], "A": ["B"]},
    )

    tree.restore_item("A", "P")

    assert tree.children("P") == ("A",)
    assert tree.get_unused_items() == []


def test_listed_child_without_record_cuts_off_its_subtree() -> None:
    tree = TreeIndex([Note(id="kid", pid="hole")], children={"root": ["hole"], "hole": ["kid"]})
    assert [n.id for n in tree.get_unused_items()] == ["kid"]


def test_replace_without_child_lists_derives_them_from_pid() -> None:
    tree = TreeIndex([Note(id="A", pid="root")], children={"root": []})
    tree.replace([Note(id="A", pid="root")])
    assert tree.is_reachable("A")
