"""Tests for hook kind inference and discovery."""

import pytest

from hookscan.core.hooks import infer_hook_kind, load_hook_file, load_hooks, load_stack_hooks
from hookscan.core.models import HookKind


class TestInferHookKind:
    @pytest.mark.parametrize(
        "name,kind",
        [
            ("post-tool-lint", HookKind.POST_TOOL_USE),
            ("PostToolFormat", HookKind.POST_TOOL_USE),
            ("pre-tool-guard", HookKind.PRE_TOOL_USE),
            ("session-start-banner", HookKind.SESSION_START),
            ("SessionEnd", HookKind.SESSION_END),
            ("user-prompt-filter", HookKind.USER_PROMPT_SUBMIT),
            ("prompt-logger", HookKind.USER_PROMPT_SUBMIT),
            ("desktop-notification", HookKind.NOTIFICATION),
            ("subagent-stop-summary", HookKind.SUBAGENT_STOP),
            ("pre-compact-save", HookKind.PRE_COMPACT),
            ("stop-sound", HookKind.STOP),
            ("random", HookKind.PRE_TOOL_USE),
            ("", HookKind.PRE_TOOL_USE),
        ],
    )
    def test_inference(self, name, kind):
        assert infer_hook_kind(name) == kind

    def test_first_match_wins(self):
        # "post-tool" is checked before "stop"
        assert infer_hook_kind("post-tool-stop") == HookKind.POST_TOOL_USE
        # "subagent-stop" contains "stop" but is checked first
        assert infer_hook_kind("SUBAGENT-STOP") == HookKind.SUBAGENT_STOP


class TestLoadHooks:
    def test_missing_directory(self, tmp_path):
        assert load_hooks(tmp_path / "nope") == []

    def test_loads_known_extensions(self, hooks_dir):
        directory = hooks_dir(
            {
                "post-tool-lint.sh": "eslint .",
                "guard.py": "print('x')",
                "notify.js": "console.log(1)",
                "types.ts": "let x: number = 1",
                "README.md": "# docs",
            }
        )
        hooks = load_hooks(directory)
        assert [h.name for h in hooks] == ["guard", "notify", "post-tool-lint", "types"]
        lint = hooks[2]
        assert lint.kind == HookKind.POST_TOOL_USE
        assert lint.content == "eslint ."
        assert lint.file_path == str(directory / "post-tool-lint.sh")

    def test_binary_file(self, tmp_path):
        path = tmp_path / "blob.sh"
        path.write_bytes(b"\xff\xfe\x00rm -rf /")
        hook = load_hook_file(path)
        assert hook.content.endswith("rm -rf /")

    def test_skips_subdirectories(self, hooks_dir):
        directory = hooks_dir({"a.sh": "ls"})
        (directory / "nested.py").mkdir()
        assert [h.name for h in load_hooks(directory)] == ["a"]


class TestLoadStackHooks:
    def test_builds_descriptors(self):
        data = {
            "hooks": [
                {
                    "name": "fmt",
                    "type": "PostToolUse",
                    "content": "prettier --write .",
                    "matcher": "Edit",
                    "description": "Formats files",
                },
                {"name": "session-start-hello", "content": "echo hi"},
            ]
        }
        hooks = load_stack_hooks(data)
        assert [h.name for h in hooks] == ["fmt", "session-start-hello"]
        assert hooks[0].kind == HookKind.POST_TOOL_USE
        assert hooks[0].matcher == "Edit"
        assert hooks[0].description == "Formats files"
        assert hooks[1].kind == HookKind.SESSION_START

    def test_unknown_type_inferred(self):
        hooks = load_stack_hooks({"hooks": [{"name": "stop-x", "type": "Whenever", "content": ""}]})
        assert hooks[0].kind == HookKind.STOP

    @pytest.mark.parametrize(
        "data",
        [None, [], {}, {"hooks": "x"}, {"hooks": [None, 1, {"name": "no-content"}, {"content": 5}]}],
    )
    def test_malformed(self, data):
        assert load_stack_hooks(data) == []

    def test_unnamed(self):
        assert load_stack_hooks({"hooks": [{"content": "ls"}]})[0].name == "unnamed"
