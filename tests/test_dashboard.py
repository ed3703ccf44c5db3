from git_hist import dashboard
from git_hist.commit import CommitMetadata
from git_hist.config import Settings, UserType
from git_hist.diff import CHROME_HEIGHT, ChangeTag, DiffLine, DiffLinePart, compute_diff_lines
from git_hist.git import GitRepository
from git_hist.history import build_history
from git_hist.state import NavigationState

from conftest import make_history, numbered


def _settings(**kwargs):
    return Settings(file_path="a.txt", **kwargs)


class TestNaviText:
    def test_latest_has_only_older_arrows(self, store):
        history = make_history(store, ["a\n", "b\n"])
        state = NavigationState.first(history, CHROME_HEIGHT + 10)
        assert dashboard.navi_text(state, history, older=True).plain.split("\n") == ["", "<<", "<<", ""]
        assert dashboard.navi_text(state, history, older=False).plain.split("\n") == ["", "", "", ""]

    def test_earliest_has_only_newer_arrows(self, store):
        history = make_history(store, ["a\n", "b\n"])
        state = NavigationState.first(history, CHROME_HEIGHT + 10).move_older(history)
        assert dashboard.navi_text(state, history, older=True).plain.split("\n") == ["", "", "", ""]
        assert dashboard.navi_text(state, history, older=False).plain.split("\n") == ["", ">>", ">>", ""]

    def test_scroll_marks(self, store):
        history = make_history(store, [numbered(40)])
        state = NavigationState.first(history, CHROME_HEIGHT + 10).scroll_line_down(history)
        assert dashboard.navi_text(state, history, older=True).plain.split("\n")[0] == dashboard.SCROLL_UP_SYMBOL
        assert dashboard.navi_text(state, history, older=False).plain.split("\n")[3] == dashboard.SCROLL_DOWN_SYMBOL


class TestDiffText:
    def test_window_and_gutter(self, store):
        history = make_history(store, [numbered(12), numbered(12, {1: "one"})])
        state = NavigationState.first(history, CHROME_HEIGHT + 3)
        rows = dashboard.diff_text(state, history, _settings()).plain.split("\n")
        assert rows == [
            " 1  1|  line 0",
            " 2   |- line 1",
            "    2|+ one",
        ]

    def test_binary_placeholder(self, store):
        history = make_history(store, [b"\x00", b"\x00\x01"])
        state = NavigationState.first(history, CHROME_HEIGHT + 3)
        assert dashboard.diff_text(state, history, _settings()).plain == dashboard.BINARY_PLACEHOLDER

    def test_tabs_are_expanded(self):
        line = compute_diff_lines("", "\tx\n")[0]
        text = dashboard.diff_line_text(line, 1, _settings(tab_size=2))
        assert text.plain == "  1|+   x"

    def test_tab_stops_span_parts(self):
        line = DiffLine(0, None, 0, ChangeTag.INSERT, (DiffLinePart("xy", True), DiffLinePart("\tc")))
        text = dashboard.diff_line_text(line, 1, _settings(tab_size=4))
        assert text.plain == "  1|+ xy  c"
        assert dashboard.diff_line_text(line, 1, _settings(tab_size=4, emphasize_diff=True)).plain == text.plain

    def test_emphasis_only_when_enabled(self):
        lines = compute_diff_lines("hello world\n", "hello there\n")
        inserted = lines[1]
        plain = dashboard.diff_line_text(inserted, 1, _settings())
        emphasized = dashboard.diff_line_text(inserted, 1, _settings(emphasize_diff=True))
        assert plain.plain == emphasized.plain
        assert not any("reverse" in str(span.style) for span in plain.spans)
        assert any("reverse" in str(span.style) for span in emphasized.spans)


class TestCommitPanel:
    def test_title_and_body(self, builder):
        content = "".join(f"line {i}\n" for i in range(10))
        builder.commit("add", {"old.txt": content}, author="Alice", committer="Carol")
        builder.commit("Move it\n\nbecause", {"new.txt": content}, removed=["old.txt"], author="Bob", committer="Dave")
        repo = GitRepository(builder.repo)
        history = build_history(repo, "new.txt")
        metadata = CommitMetadata(repo)
        point = history.latest()
        commit = metadata.commit(point.commit_id)

        title = dashboard.commit_title(point, metadata, _settings()).plain
        assert title == f" Commit: {commit.short_id} {commit.author_date:[%Y-%m-%d]} (HEAD -> main) @Bob "

        title = dashboard.commit_title(
            point,
            metadata,
            _settings(full_hash=True, name_of=UserType.COMMITTER, date_of=UserType.COMMITTER, date_format="%H:%M"),
        ).plain
        assert title == f" Commit: {commit.long_id} {commit.committer_date:%H:%M} (HEAD -> main) @Dave "

        body = dashboard.commit_body(point, metadata).plain
        assert body == "Move it\n* Renamed: old.txt -> new.txt"

        added = history.earliest()
        assert dashboard.commit_body(added, metadata).plain == "add\n* Added: old.txt"
        assert "(" not in dashboard.commit_title(added, metadata, _settings()).plain
