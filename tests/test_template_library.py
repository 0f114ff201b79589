import pytest

from promptdesk.errors import InvalidInputError, NotFoundError
from promptdesk.services.template_library import BUILTIN_TEMPLATES, TemplateLibrary


def test_fresh_library_starts_with_builtins():
    library = TemplateLibrary()
    names = [t.name for t in library.list()]
    assert len(names) == 8
    assert names[0] == "Code Review"
    assert names[-1] == "Research Assistant"


def test_empty_stored_library_stays_empty():
    assert TemplateLibrary([]).list() == []


def test_save_requires_name_and_content():
    library = TemplateLibrary([])
    with pytest.raises(InvalidInputError):
        library.save("", "d", "c", "cat")
    with pytest.raises(InvalidInputError):
        library.save("n", "d", "", "cat")
    with pytest.raises(InvalidInputError):
        library.save("   ", "d", "c", "cat")
    assert library.list() == []


def test_save_appends_with_fresh_id_and_defaults():
    library = TemplateLibrary([])
    first = library.save("Bug report", None, "Describe the bug:", None)
    second = library.save("Summary", "Summarize text", "Summarize:\n", "Writing")

    assert [t.id for t in library.list()] == [first.id, second.id]
    assert first.id != second.id
    assert first.description == ""
    assert first.category == "Custom"
    assert second.category == "Writing"
    assert second.created_at.tzinfo is not None


def test_delete_is_a_noop_for_unknown_ids():
    library = TemplateLibrary()
    assert library.delete("does-not-exist") is False
    assert len(library.list()) == len(BUILTIN_TEMPLATES)

    assert library.delete("3") is True
    assert "3" not in [t.id for t in library.list()]


def test_load_into_returns_content():
    library = TemplateLibrary()
    assert library.load_into("1").startswith("Please review the following code")
    with pytest.raises(NotFoundError):
        library.load_into("missing")


def test_listeners_fire_on_save_and_delete_only():
    library = TemplateLibrary([])
    calls = []
    library.subscribe(calls.append)

    template = library.save("n", "", "c")
    library.delete("missing")
    library.delete(template.id)

    assert [len(c) for c in calls] == [1, 0]
