# minish

A small interactive command shell for POSIX systems. It reads a line, splits
it into words and operators, expands variables, and runs the result either as
a single command or as a pipeline of forked processes.

## Installing

    pip install .

## Running

    minish

The shell takes no arguments. If any are given, it prints
`no arguments allowed` and exits with status 1. At the `minishell$ ` prompt,
type commands. Ctrl-D ends input: the shell prints `exit` and returns the last
exit status. Ctrl-C at the prompt abandons the current line.

## What it understands

- Words, with single and double quotes. Operators inside quotes are ordinary
  characters. If a quote is left open, the shell prints
  `unexpected EOF while looking for matching '"'` and sets status 2.
- Pipes: `ls | grep py | wc -l`. The pipeline's status is that of its last
  command. Every output file in the pipeline is created or truncated before
  any command starts.
- Redirections: `< file`, `> file`, `>> file`, and heredocs `<< LIMIT`. A
  heredoc reads lines at a `> ` prompt until a line equals the limiter.
  End of input inside a heredoc drops the command and sets status 1. Quotes
  are stripped from redirection targets.
- Expansion: `$NAME` takes its value from the exported variables and is empty
  if the name is unset. `$?` gives the last exit status. A `$` that is not
  followed by a name character stays as it is. Nothing is expanded inside
  single quotes. Arguments that expand to an empty string are dropped.
- Syntax checks: a leading pipe, `| |`, a trailing pipe, or a redirection
  that is not followed by a word print
  ``syntax error near unexpected token `X'`` and set status 2.

## Builtins

| Command   | Behaviour |
|-----------|-----------|
| `echo`    | Prints its arguments separated by spaces. Any number of leading `-n`, `-nn`, ... options suppress the newline. |
| `pwd`     | Prints the working directory. |
| `cd`      | With no argument, goes to `$HOME`; it fails with `cd: HOME not set` if `HOME` is unset. `cd -` goes to `$OLDPWD` and prints it on standard error. More than one argument is an error. `PWD` and `OLDPWD` are updated when they already exist. |
| `env`     | Lists exported variables as `KEY=value`. |
| `export`  | Without arguments, lists variables sorted as `declare -x KEY="value"` and leaves out `_`. `NAME=value` sets a variable; a bare `NAME` sets it to the empty string. Invalid names are reported and give status 1. |
| `unset`   | Removes variables. Invalid names are reported and give status 1. |
| `exit`    | Leaves the shell with an optional numeric status, taken modulo 256. A non-numeric argument, or one too large for a 64-bit integer, gives status 2. When there are too many arguments, it prints an error, returns 1 and stays in the shell. |
| `history` | Lists the lines entered so far, numbered from 1. |

Other commands are looked up on `PATH`. A name that contains `/` is used
directly as a path. Status codes for other commands:

- 127 when the command cannot be found.
- 126 when it is not executable.
- 128 plus the signal number when it is killed by a signal.

On start-up, `SHLVL` is raised by one if it is set. A negative level becomes 0.

## Using it as a library

The stages can be used on their own:

- `minish.lexer.tokenize_line` splits a line into `Token`s. It raises
  `UnclosedQuoteError`.
- `minish.parser.parse_tokens` groups tokens into `Command`s. It raises
  `ShellSyntaxError`.
- `minish.expansion.expand_arg` and `expand_args` expand words against a list
  of `KEY=VALUE` strings and an exit code.
- `minish.state.create_shell` builds a `Shell` from a mapping or from
  `KEY=VALUE` strings.
- `minish.executor.process_input` runs one line in that shell.
- `minish.cli.main_loop` takes an optional `read_line(prompt)` callable, which
  returns `None` at end of input.

## What it does not do

- No command lists with `;`, `&&` or `||`.
- No subshells.
- No background jobs or job control.
- No wildcard or tilde expansion.
- No scripts: the shell only reads commands interactively from its prompt.

## Tests

    pip install .[test]
    pytest