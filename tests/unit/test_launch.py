import pytest

from jxauth.core.game import CharacterRecord
from jxauth.core.oauth import CharacterNotFoundError, LaunchError
from jxauth.launch import LaunchContext, build_environment, find_character, launch

CTX = LaunchContext(session_id="S1", character_id="123456", display_name="Zezima")
CHARACTERS = [
    CharacterRecord(id="123456", display_name="Zezima"),
    CharacterRecord(id="654321", display_name="Woox"),
]


@pytest.mark.unit
class TestFindCharacter:
    def test_finds_by_id(self):
        assert find_character(CHARACTERS, "654321").display_name == "Woox"

    def test_unknown_id_lists_available(self):
        with pytest.raises(CharacterNotFoundError) as exc_info:
            find_character(CHARACTERS, "999")
        assert exc_info.value.character_id == "999"
        assert "Zezima (ID: 123456)" in exc_info.value.hint
        assert "Woox (ID: 654321)" in exc_info.value.hint


@pytest.mark.unit
class TestBuildEnvironment:
    def test_sets_the_three_variables_on_top_of_base(self):
        env = build_environment(CTX, {"PATH": "/usr/bin", "JX_SESSION_ID": "stale"})
        assert env == {
            "PATH": "/usr/bin",
            "JX_SESSION_ID": "S1",
            "JX_CHARACTER_ID": "123456",
            "JX_DISPLAY_NAME": "Zezima",
        }

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("SOME_VAR", "1")
        assert build_environment(CTX)["SOME_VAR"] == "1"


@pytest.mark.unit
class TestLaunch:
    def test_execs_program_with_args(self):
        calls = []
        launch(CTX, "runelite", ["--debug"], base_env={}, exec_fn=lambda *a: calls.append(a))

        program, argv, env = calls[0]
        assert program == "runelite"
        assert argv == ["runelite", "--debug"]
        assert env["JX_SESSION_ID"] == "S1"

    def test_exec_failure_is_launch_error(self):
        def missing(program, argv, env):
            raise FileNotFoundError(2, "No such file or directory")

        with pytest.raises(LaunchError) as exc_info:
            launch(CTX, "no-such-client", exec_fn=missing)
        assert exc_info.value.program == "no-such-client"
        assert "No such file or directory" in str(exc_info.value)

    def test_repr_hides_session_id(self):
        assert "S1" not in repr(CTX)
