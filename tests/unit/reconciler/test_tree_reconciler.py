"""Unit tests for reconciler.tree_reconciler module."""

from unittest.mock import Mock

import pytest

from src.content_converter.errors import ImageConversionError
from src.content_converter.html_converter import converter_factory
from src.models.briefs import TITLE_KIND
from src.models.errors import DuplicateTitleError
from src.reconciler.errors import OwnershipViolationError
from src.reconciler.hierarchy_builder import DestinationHierarchyBuilder, SourceHierarchyBuilder
from src.reconciler.tree_reconciler import TreeReconciler
from tests.helpers.fake_services import FakeConfluence, FakeImageFetcher, FakeYuque


def build_spaces(yuque, confluence, sync_repos=None, exclude_docs=None):
    source = SourceHierarchyBuilder(yuque).build(sync_repos, exclude_docs)
    destination = DestinationHierarchyBuilder(confluence).build()
    return source, destination


def run_sync(yuque, confluence, factory=None, **kwargs):
    source, destination = build_spaces(yuque, confluence, **kwargs)
    factory = factory or converter_factory(yuque, confluence, FakeImageFetcher())
    reconciler = TreeReconciler(confluence, factory, confluence.space_key)
    return reconciler.synchronize(source, destination)


@pytest.fixture
def yuque():
    return FakeYuque()


@pytest.fixture
def confluence():
    return FakeConfluence("DOCS")


class TestConvergence:
    """Test cases for the convergence pass."""

    def test_creates_missing_repo_and_pages(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100, body="<p>Hello</p>")

        summary = run_sync(yuque, confluence)

        guide_id = confluence.find("Guide", confluence.root_id)
        assert guide_id is not None
        assert confluence.children_titles(guide_id) == ["Intro"]
        intro = confluence.pages[confluence.find("Intro", guide_id)]
        assert intro["version"] == 2
        assert "Hello" in intro["body"]
        assert summary.repos_created == 1
        assert summary.pages_created == 1

    def test_repo_page_is_created_with_plain_title_and_empty_body(self, yuque, confluence):
        yuque.add_repo("Guide")

        run_sync(yuque, confluence)

        assert confluence.calls_to("create_page") == [("Guide", confluence.root_id, "")]

    def test_new_page_starts_as_placeholder(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)

        run_sync(yuque, confluence)

        creates = confluence.calls_to("create_page")
        assert creates[1][0] == "[Temp]Intro"
        assert creates[1][2] == ""
        update = confluence.calls_to("update_page")[0]
        assert update[1] == "Intro"

    def test_parent_is_complete_before_children_are_created(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        intro = yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Setup", mtime=100, parent_uuid=intro)

        run_sync(yuque, confluence)

        events = []
        for name, args in confluence.mutations:
            if name == "create_page":
                events.append(("create", args[0]))
            elif name == "update_page":
                events.append(("update", args[1]))
        assert events.index(("update", "Intro")) < events.index(("create", "[Temp]Setup"))

        intro_id = confluence.find("Intro")
        assert confluence.children_titles(intro_id) == ["Setup"]

    def test_stale_page_is_updated(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=200, body="<p>New</p>")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        intro_id = confluence.add_page("Intro", guide_id, mtime=150, version=4)

        summary = run_sync(yuque, confluence)

        assert confluence.calls_to("update_page")[0][:3] == (intro_id, "Intro", 5)
        assert "New" in confluence.pages[intro_id]["body"]
        assert summary.pages_updated == 1

    @pytest.mark.parametrize("destination_mtime", [100, 150])
    def test_up_to_date_page_is_not_touched(self, yuque, confluence, destination_mtime):
        """Equal or newer destination mtime means no update."""
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("Intro", guide_id, mtime=destination_mtime)

        summary = run_sync(yuque, confluence)

        assert confluence.mutations == []
        assert yuque.body_requests == []
        assert summary.pages_unchanged == 1

    def test_unchanged_parent_still_recurses(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        intro = yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Setup", mtime=300, parent_uuid=intro)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        intro_id = confluence.add_page("Intro", guide_id, mtime=200)
        setup_id = confluence.add_page("Setup", intro_id, mtime=200)

        run_sync(yuque, confluence)

        assert [args[0] for args in confluence.calls_to("update_page")] == [setup_id]

    def test_deprecated_page_is_never_matched(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        old_id = confluence.add_page("[Deprecated]Intro", guide_id, mtime=50)

        run_sync(yuque, confluence)

        assert sorted(confluence.children_titles(guide_id)) == ["Intro", "[Deprecated]Intro"]
        assert confluence.pages[old_id]["version"] == 1

    def test_title_entries_become_empty_pages(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        group = yuque.add_doc(guide, "Chapter 1", mtime=0, kind=TITLE_KIND)
        yuque.add_doc(guide, "Intro", mtime=100, parent_uuid=group)

        run_sync(yuque, confluence)

        chapter_id = confluence.find("Chapter 1")
        assert confluence.pages[chapter_id]["body"] == ""
        assert confluence.children_titles(chapter_id) == ["Intro"]

    def test_unsynced_destination_repos_are_left_alone(self, yuque, confluence):
        yuque.add_repo("Guide")
        other_id = confluence.add_page("Handbook", confluence.root_id)
        confluence.add_page("Stray", other_id)

        run_sync(yuque, confluence)

        assert confluence.calls_to("update_page_title") == []
        assert confluence.children_titles(other_id) == ["Stray"]

    def test_conversion_failure_aborts_run(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Usage", mtime=100)
        failing = Mock()
        failing.return_value.convert.side_effect = ImageConversionError("u", "boom")

        with pytest.raises(ImageConversionError):
            run_sync(yuque, confluence, factory=failing)

        assert failing.call_count == 1
        assert ("[Temp]Usage",) not in [args[:1] for args in confluence.calls_to("create_page")]


class TestPlaceholderCleanup:
    """Test cases for the placeholder cleanup passes."""

    def test_leftover_placeholders_are_deleted_first(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        stale_id = confluence.add_page("[Temp]Intro", guide_id)

        summary = run_sync(yuque, confluence)

        assert confluence.calls[2:4] == [
            ("get_page_space_owner", (stale_id,)),
            ("delete_page", (stale_id,)),
        ]
        assert confluence.children_titles(guide_id) == ["Intro"]
        assert summary.placeholders_deleted == 1

    def test_nested_placeholders_are_deleted_deepest_first(self, yuque, confluence):
        yuque.add_repo("Guide")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        outer_id = confluence.add_page("[Temp]Outer", guide_id)
        inner_id = confluence.add_page("[Temp]Inner", outer_id)

        run_sync(yuque, confluence)

        assert confluence.calls_to("delete_page") == [(inner_id,), (outer_id,)]
        assert confluence.children_titles(guide_id) == []

    def test_foreign_placeholder_is_never_deleted(self, yuque, confluence):
        yuque.add_repo("Guide")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("[Temp]Mine", guide_id)
        foreign_id = confluence.add_page("[Temp]Foreign", guide_id)
        source, destination = build_spaces(yuque, confluence)
        confluence.pages[foreign_id]["space"] = "OTHER"
        reconciler = TreeReconciler(confluence, Mock(), "DOCS")

        with pytest.raises(OwnershipViolationError) as exc_info:
            reconciler.synchronize(source, destination)

        assert exc_info.value.page_id == foreign_id
        assert exc_info.value.actual_space == "OTHER"
        assert confluence.calls_to("delete_page") == []
        assert foreign_id in confluence.pages

    def test_every_owner_is_checked_before_any_delete(self, yuque, confluence):
        yuque.add_repo("Guide")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        first_id = confluence.add_page("[Temp]First", guide_id)
        nested_id = confluence.add_page("[Temp]Nested", first_id)
        second_id = confluence.add_page("[Temp]Second", guide_id)

        run_sync(yuque, confluence)

        cleanup = [
            call for call in confluence.calls
            if call[0] in ("get_page_space_owner", "delete_page")
        ]
        assert [name for name, _ in cleanup] == ["get_page_space_owner"] * 3 + ["delete_page"] * 3
        assert {args[0] for _, args in cleanup[:3]} == {first_id, nested_id, second_id}

    def test_unfinished_placeholder_is_removed_in_final_pass(self, yuque, confluence):
        """A placeholder whose conversion did not clear the marker is deleted."""
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        no_op = Mock()

        summary = run_sync(yuque, confluence, factory=no_op)

        guide_id = confluence.find("Guide")
        assert confluence.children_titles(guide_id) == []
        assert summary.placeholders_deleted == 1
        assert confluence.mutations[-1][0] == "delete_page"


class TestDeprecation:
    """Test cases for the deprecation pass."""

    def test_missing_page_is_deprecated(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("Intro", guide_id, mtime=500)
        old_id = confluence.add_page("Old", guide_id, version=3)

        summary = run_sync(yuque, confluence)

        assert confluence.calls_to("update_page_title") == [(old_id, "[Deprecated]Old", 4)]
        assert confluence.pages[old_id]["title"] == "[Deprecated]Old"
        assert summary.pages_deprecated == 1

    def test_deeply_nested_orphans_are_found(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        intro = yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Setup", mtime=100, parent_uuid=intro)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        intro_id = confluence.add_page("Intro", guide_id, mtime=500)
        setup_id = confluence.add_page("Setup", intro_id, mtime=500)
        gone_id = confluence.add_page("Gone", setup_id)

        run_sync(yuque, confluence)

        assert confluence.calls_to("update_page_title") == [(gone_id, "[Deprecated]Gone", 2)]

    def test_children_of_orphan_are_not_deprecated_separately(self, yuque, confluence):
        yuque.add_repo("Guide")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        old_id = confluence.add_page("Old", guide_id)
        confluence.add_page("Child", old_id)

        run_sync(yuque, confluence)

        assert [args[0] for args in confluence.calls_to("update_page_title")] == [old_id]

    def test_protected_and_deprecated_pages_are_skipped(self, yuque, confluence):
        yuque.add_repo("Guide")
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("[Protected]Keep", guide_id)
        confluence.add_page("[Deprecated]Gone", guide_id)

        run_sync(yuque, confluence)

        assert confluence.calls_to("update_page_title") == []

    def test_deprecation_runs_before_convergence(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "New", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("Old", guide_id)

        run_sync(yuque, confluence)

        names = [name for name, _ in confluence.mutations]
        assert names.index("update_page_title") < names.index("create_page")


class TestDuplicateTitles:
    """Test cases for sibling title uniqueness."""

    def test_duplicate_source_titles_fail_before_mutating(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Intro", mtime=100)
        confluence.add_page("Guide", confluence.root_id)

        with pytest.raises(DuplicateTitleError) as exc_info:
            run_sync(yuque, confluence)

        assert exc_info.value.side == "source"
        assert confluence.mutations == []

    def test_duplicate_destination_titles_fail(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        guide_id = confluence.add_page("Guide", confluence.root_id)
        confluence.add_page("Intro", guide_id)
        confluence.add_page("Intro", guide_id)

        with pytest.raises(DuplicateTitleError) as exc_info:
            run_sync(yuque, confluence)

        assert exc_info.value.side == "destination"


class TestIdempotence:
    """Test cases for repeated runs."""

    def test_second_run_makes_no_mutations(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        intro = yuque.add_doc(guide, "Intro", mtime=100, body="<p>Hi</p>")
        yuque.add_doc(guide, "Setup", mtime=120, parent_uuid=intro)
        group = yuque.add_doc(guide, "Reference", mtime=0, kind=TITLE_KIND)
        yuque.add_doc(guide, "API", mtime=130, parent_uuid=group)
        run_sync(yuque, confluence)
        confluence.reset_calls()

        summary = run_sync(yuque, confluence)

        assert confluence.mutations == []
        assert summary.mutations == 0
        assert summary.pages_unchanged == 4

    def test_source_edit_updates_only_that_page(self, yuque, confluence):
        guide = yuque.add_repo("Guide")
        yuque.add_doc(guide, "Intro", mtime=100)
        yuque.add_doc(guide, "Usage", mtime=100)
        run_sync(yuque, confluence)
        confluence.reset_calls()

        yuque.touch(guide, "Usage", mtime=5000, body="<p>edited</p>")
        run_sync(yuque, confluence)

        updates = confluence.calls_to("update_page")
        assert len(updates) == 1
        assert updates[0][1] == "Usage"
