import os

import pytest

from minish.builtins import (
    ShellExit,
    cd_builtin,
    echo_builtin,
    env_builtin,
    exit_builtin,
    export_builtin,
    history_builtin,
    home_path,
    is_builtin,
    is_n_option,
    parse_exit_status,
    pwd_builtin,
    run_builtin,
    unset_builtin,
    validate_export,
    validate_unset,
)
from minish.state import create_shell


@pytest.mark.parametrize(
    "name", ["echo", "history", "pwd", "cd", "unset", "exit", "env", "export"]
)
def test_is_builtin_names(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "", None, "ECHO"])
def test_is_builtin_others(name):
    assert is_builtin(name) is False


@pytest.mark.parametrize("arg,expected", [
    ("-n", True), ("-nnn", True), ("-", True),
    ("-na", False), ("n", False), ("", False), (None, False),
])
def test_is_n_option(arg, expected):
    assert is_n_option(arg) is expected


def test_echo_joins_words(capsys):
    assert echo_builtin(["echo", "hello", "world"]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_echo_n_options(capsys):
    echo_builtin(["echo", "-n", "-nn", "hi", "-n"])
    assert capsys.readouterr().out == "hi -n"


def test_echo_empty(capsys):
    echo_builtin(["echo"])
    assert capsys.readouterr().out == "\n"
    echo_builtin(["echo", "-n"])
    assert capsys.readouterr().out == ""


def test_pwd_prints_cwd(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell = create_shell([])
    assert pwd_builtin(shell, ["pwd"]) == 0
    assert capsys.readouterr().out == os.getcwd() + "\n"


def test_pwd_rejects_other_command():
    shell = create_shell([])
    assert pwd_builtin(shell, ["ls"]) == 1


def test_home_path_uses_home(tmp_path):
    shell = create_shell([f"HOME={tmp_path}"])
    assert home_path(shell) == str(tmp_path)


def test_home_path_from_cwd(tmp_path, monkeypatch):
    deep = tmp_path / "x" / "y"
    deep.mkdir(parents=True)
    monkeypatch.chdir(deep)
    result = home_path(create_shell([]))
    assert os.getcwd().startswith(result + "/")
    assert result.count("/") == 2


def test_home_path_at_root(monkeypatch):
    monkeypatch.chdir("/")
    assert home_path(create_shell([])) is None


def test_cd_changes_directory_and_env(tmp_path, monkeypatch):
    sub = tmp_path / "sub"
    sub.mkdir()
    monkeypatch.chdir(tmp_path)
    before = os.getcwd()
    shell = create_shell([f"HOME={tmp_path}", "PWD=x", "OLDPWD=y"])
    assert cd_builtin(shell, ["cd", str(sub)]) == 0
    assert os.path.samefile(os.getcwd(), sub)
    assert shell.env.get("PWD") == os.getcwd()
    assert shell.env.get("OLDPWD") == before


def test_cd_without_args_goes_home(tmp_path, monkeypatch):
    sub = tmp_path / "sub"
    sub.mkdir()
    monkeypatch.chdir(sub)
    shell = create_shell([f"HOME={tmp_path}"])
    assert cd_builtin(shell, ["cd"]) == 0
    assert os.path.samefile(os.getcwd(), tmp_path)


def test_cd_dash_uses_oldpwd(tmp_path, monkeypatch, capsys):
    sub = tmp_path / "sub"
    sub.mkdir()
    monkeypatch.chdir(tmp_path)
    shell = create_shell([f"HOME={tmp_path}", f"OLDPWD={sub}"])
    assert cd_builtin(shell, ["cd", "-"]) == 0
    assert os.path.samefile(os.getcwd(), sub)
    assert capsys.readouterr().err == f"{sub}\n"


def test_cd_too_many_arguments(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell = create_shell([f"HOME={tmp_path}"])
    assert cd_builtin(shell, ["cd", "a", "b"]) == 1
    assert "cd: too many arguments" in capsys.readouterr().err


def test_cd_home_not_set(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell = create_shell([])
    assert cd_builtin(shell, ["cd"]) == 1
    assert "cd: HOME not set" in capsys.readouterr().err


def test_cd_missing_directory_records_status(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell = create_shell([f"HOME={tmp_path}"])
    shell.env.add_if_missing("?", "0", False)
    assert cd_builtin(shell, ["cd", str(tmp_path / "missing")]) == 1
    assert capsys.readouterr().err.startswith("cd: ")
    assert shell.env.get("?") == "1"
    assert os.path.samefile(os.getcwd(), tmp_path)


def test_cd_without_pwd_marks_oldpwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shell = create_shell([f"HOME={tmp_path}", "OLDPWD=old"])
    assert cd_builtin(shell, ["cd", str(tmp_path)]) == 0
    assert shell.env.get("OLDPWD") == " "


def test_env_prints_exported(capsys):
    shell = create_shell(["A=1", "B"])
    assert env_builtin(shell) == 0
    assert capsys.readouterr().out == "A=1\n"


def test_env_empty_returns_error():
    assert env_builtin(create_shell([])) == 1


@pytest.mark.parametrize("text,expected", [
    ("A=1", 1), ("_x=", 1), ("NAME", 2), ("1A", 0), ("A-B", 0), ("", 0), (None, 0),
])
def test_validate_export(text, expected):
    assert validate_export(text) == expected


def test_export_replaces_single_letter(capsys):
    shell = create_shell(["A=0", "PATH=/bin"])
    assert export_builtin(shell, ["export", "A=1"]) == 0
    assert "A=1" in shell.env_arr
    assert "A=0" not in shell.env_arr
    assert shell.env.get("A") == "1"


def test_export_bare_name_gets_empty_value():
    shell = create_shell(["PATH=/bin"])
    export_builtin(shell, ["export", "NEW"])
    assert "NEW=" in shell.env_arr
    assert shell.env.get("NEW") == ""


def test_export_invalid_identifier(capsys):
    shell = create_shell(["PATH=/bin"])
    assert export_builtin(shell, ["export", "1X", "OK=yes"]) == 1
    assert "not a valid identifier" in capsys.readouterr().err
    assert "OK=yes" in shell.env_arr
    assert shell.exit_status.code == 1


def test_export_lists_sorted(capsys):
    shell = create_shell(["B=2", "A=1", "_=x"])
    assert export_builtin(shell, ["export"]) == 0
    assert capsys.readouterr().out == 'declare -x A="1"\ndeclare -x B="2"\n'


@pytest.mark.parametrize("text,expected", [
    ("A", True), ("_a1", True), ("A=1", False), ("9", False), ("", False),
])
def test_validate_unset(text, expected):
    assert validate_unset(text) is expected


def test_unset_removes_variable():
    shell = create_shell(["A=1", "B=2"])
    assert unset_builtin(shell, ["unset", "A"]) == 0
    assert shell.env.get("A") is None
    assert "A=1" not in shell.env_arr
    assert "B=2" in shell.env_arr


def test_unset_invalid_name(capsys):
    shell = create_shell(["A=1"])
    assert unset_builtin(shell, ["unset", "1bad"]) == 1
    assert "invalid parameter name" in capsys.readouterr().err
    assert shell.env.get("A") == "1"


@pytest.mark.parametrize("arg,expected", [
    ("42", 42), (" 7 ", 7), ("+3", 3), ("-1", 255), ("256", 0),
])
def test_parse_exit_status(arg, expected):
    assert parse_exit_status(arg) == expected


@pytest.mark.parametrize(
    "arg", ["abc", "", "   ", "+", "12a", "-x", "9223372036854775808"]
)
def test_parse_exit_status_errors(arg):
    with pytest.raises(ValueError):
        parse_exit_status(arg)


def test_exit_uses_last_status(capsys):
    shell = create_shell([])
    shell.exit_status.code = 5
    with pytest.raises(ShellExit) as info:
        exit_builtin(shell, ["exit"])
    assert info.value.code == 5
    assert capsys.readouterr().err == "exit\n"


def test_exit_with_code():
    with pytest.raises(ShellExit) as info:
        exit_builtin(create_shell([]), ["exit", "3"])
    assert info.value.code == 3


def test_exit_non_numeric(capsys):
    with pytest.raises(ShellExit) as info:
        exit_builtin(create_shell([]), ["exit", "x", "y"])
    assert info.value.code == 2
    assert "exit: x: numeric argument required" in capsys.readouterr().err


def test_exit_too_many_arguments(capsys):
    assert exit_builtin(create_shell([]), ["exit", "1", "2"]) == 1
    assert "exit: too many arguments" in capsys.readouterr().err


def test_exit_quiet_in_pipeline(capsys):
    shell = create_shell([])
    shell.commands.extend(["first", "second"])
    with pytest.raises(ShellExit):
        exit_builtin(shell, ["exit", "0"])
    assert "exit\n" not in capsys.readouterr().err


def test_history_lists_lines(capsys):
    shell = create_shell([])
    shell.add_history("ls")
    shell.add_history("pwd")
    assert history_builtin(shell, ["history"]) == 0
    assert capsys.readouterr().out == "1  ls\n2  pwd\n"


def test_run_builtin_dispatches(capsys):
    shell = create_shell(["A=1"])
    assert run_builtin(shell, ["echo", "x"]) == 0
    assert capsys.readouterr().out == "x\n"
    assert run_builtin(shell, ["unset", "1bad"]) == 1
    assert run_builtin(shell, ["unset", "A"]) == 0
    assert shell.env.get("A") is None