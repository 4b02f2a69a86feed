from spell_search.ingestion.extractor import (
    MAX_DEPTH,
    Leaf,
    Sequence,
    UNRECOGNIZED,
    Wrapper,
    extract_text,
    flatten,
    parse_entries,
)


def test_leaf_returns_itself():
    assert extract_text("A bright streak flashes.") == "A bright streak flashes."

def test_sequence_joined_with_single_space():
    assert extract_text(["one", "two", "three"]) == "one two three"

def test_wrapper_recurses_into_entries():
    entries = ["A bright streak flashes...", {"entries": ["Secondary burst."]}]
    assert extract_text(entries) == "A bright streak flashes... Secondary burst."

def test_missing_and_unrecognized_values_are_empty():
    assert extract_text(None) == ""
    assert extract_text(42) == ""
    assert extract_text({"type": "table", "rows": [["a"]]}) == ""
    assert extract_text({"entries": []}) == ""

def test_parse_produces_tagged_variant():
    node = parse_entries(["a", {"entries": "b"}, None])
    assert node == Sequence((Leaf("a"), Wrapper(Leaf("b")), UNRECOGNIZED))

def test_nested_tree_up_to_depth_20_keeps_document_order():
    """Alternate lists and entries-objects 20 levels deep."""
    tree = "leaf-20"
    for level in range(19, -1, -1):
        if level % 2:
            tree = {"entries": [f"leaf-{level}", tree]}
        else:
            tree = [f"leaf-{level}", tree]

    expected = " ".join(f"leaf-{i}" for i in range(21))
    assert extract_text(tree) == expected

def test_depth_beyond_cap_is_dropped():
    tree = "deep"
    for _ in range(MAX_DEPTH + 10):
        tree = [tree]
    assert extract_text(tree) == ""

def test_self_referential_input_terminates():
    entries = ["start"]
    entries.append(entries)
    entries.append({"entries": entries})
    assert extract_text(entries).startswith("start")

def test_flatten_past_cap_returns_empty():
    assert flatten(Leaf("x"), depth=MAX_DEPTH + 1) == ""
