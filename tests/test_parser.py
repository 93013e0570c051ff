import pytest

from minish.lexer import Token, TokenType, tokenize_line
from minish.parser import (
    Command,
    ShellSyntaxError,
    check_syntax,
    is_redirection,
    parse_tokens,
    strip_quotes,
)


def parse(line):
    return parse_tokens(tokenize_line(line))


def test_pipeline_splits_commands():
    commands = parse("ls -l | wc")
    assert [command.args for command in commands] == [["ls", "-l"], ["wc"]]


def test_input_and_output_redirection():
    (command,) = parse("cat < 'in file' > out")
    assert command.args == ["cat"]
    assert command.infile == "in file"
    assert command.outfile == "out"
    assert command.append is False


def test_append_redirection_before_words():
    (command,) = parse(">> log echo hi")
    assert command.outfile == "log"
    assert command.append is True
    assert command.args == ["echo", "hi"]


def test_heredoc_limiter_unquoted():
    (command,) = parse("cat << 'EOF'")
    assert command.heredoc_limiter == "EOF"
    assert command.is_heredoc is True
    assert command.args == ["cat"]


def test_later_output_wins():
    (command,) = parse("> a >> b")
    assert command.outfile == "b"
    assert command.append is True
    assert command.args == []


def test_args_keep_quotes():
    (command,) = parse('echo "hi"')
    assert command.args == ["echo", '"hi"']


def test_empty_tokens_give_no_commands():
    assert parse_tokens([]) == []


@pytest.mark.parametrize(
    "line, token",
    [
        ("| ls", "|"),
        ("ls |", "newline"),
        ("ls >", "newline"),
        ("ls > | wc", "|"),
        ("ls >> < x", "<"),
        ("ls || wc", "|"),
    ],
)
def test_syntax_errors(line, token):
    with pytest.raises(ShellSyntaxError) as info:
        parse(line)
    assert info.value.token == token


def test_syntax_error_message():
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax([Token("|", TokenType.PIPE)])
    assert str(info.value) == "syntax error near unexpected token `|'"


def test_check_syntax_accepts_valid():
    tokens = tokenize_line("a < b | c > d")
    assert check_syntax(tokens) is None
    assert len(parse_tokens(tokens)) == 2


def test_strip_quotes():
    assert strip_quotes("\"it's\"") == "it's"
    assert strip_quotes("plain") == "plain"
    assert strip_quotes("''") == ""


def test_is_redirection():
    assert is_redirection(TokenType.HEREDOC)
    assert is_redirection(TokenType.INPUT)
    assert not is_redirection(TokenType.PIPE)
    assert not is_redirection(TokenType.ARG)


def test_command_defaults():
    command = Command()
    assert command.args == []
    assert command.outfile is None and command.infile is None