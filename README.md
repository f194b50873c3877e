# minish

`minish` is a Python library with the pieces of a small shell. It works on
one command line at a time:

- `minish.lexer` rejects lines with unclosed quotes or misplaced `|`, `<`,
  `>` operators, and splits a line into tokens tagged as plain words, pipes
  or redirection targets (`>`, `>>`, `<`, `<<`)
- `minish.expand` replaces `$NAME` and `$?`, leaving `$NAME` alone inside
  single quotes
- `minish.environment` keeps the shell's own copy of the environment
- `minish.builtins` runs `cd`, `env`, `export`, `unset` and `exit`
- `minish.executor` runs a builtin, or finds another command on `PATH` and
  runs it as a child process
- `minish.pipeline` and `minish.heredoc` run a chain of commands between an
  input file (or a here-document) and an output file

## Parsing a line

```python
from minish.lexer import parse, QuoteError, ShellSyntaxError

env = {"HOME": "/home/demo", "USER": "demo"}

tokens = parse("echo $USER '$HOME' > out.txt", env, 0)
for token in tokens:
    print(token.word, token.kind.name)
# echo WORD / demo WORD / $HOME WORD / out.txt REDIRECT_OUT

try:
    parse("echo 'unterminated", env, 0)
except QuoteError:
    print("quotes are not closed")

try:
    parse("ls | | wc", env, 0)
except ShellSyntaxError:
    print("syntax error")
```

`parse` returns a list of `Token` objects, each with a `word` and a `kind`
from the `TokenType` enum (`WORD`, `PIPE`, `REDIRECT_OUT`, `APPEND`,
`REDIRECT_IN`, `HEREDOC`). A redirection operator is not kept as a token of
its own; it sets the kind of the word that follows it. A blank line gives an
empty list. `QuoteError` and `ShellSyntaxError` are both subclasses of
`ParseError`, itself a `ValueError`.

The lower-level steps are also available: `is_blank`, `has_unclosed_quote`,
`check_syntax`, `mask_quoted`, `unmask`, `count_words`, `split_words` and
`build_tokens` in `minish.lexer`, and `expand`, `get_env_value` and
`in_single_quote` in `minish.expand`.

```python
from minish.expand import expand

expand("status=$? user=$USER", {"USER": "demo"}, 2)
# 'status=2 user=demo'
```

The environment may be given as a mapping or as an iterable of
`NAME=value` strings. Unknown names are kept as written, dollar sign
included.

## The environment

`Environment` keeps `NAME=value` entries in their original order, the way
`env` and `export` print them.

```python
from minish.environment import Environment

env = Environment(["PATH=/usr/bin:/bin", "PWD=/tmp", "OLDPWD=/"])
env.export("GREETING=hello")    # replaces the first entry starting with GREETING, or appends
env.unset("GREETING")           # removes every GREETING= entry
env.get("PATH")                 # "/usr/bin:/bin"
env.update_pwd("/var/tmp")      # PWD becomes the new path, OLDPWD the old one
for line in env.declarations():
    print(line)                 # declare -x NAME=value
env.as_dict()                   # mapping for a child process
```

`export` with text that has no `=` appends it unchanged.

## Builtins and external commands

```python
import sys
from minish.lexer import parse
from minish.environment import Environment
from minish.executor import execute
from minish.builtins import ShellExit

env = Environment(["PATH=/usr/bin:/bin", "PWD=/", "OLDPWD=/"])
status = 0
try:
    tokens = parse("echo hello", env.as_dict(), status)
    status = execute(tokens, env, status, sys.stdout)
except ShellExit as stop:
    print("exit requested with", stop.code)
```

`execute` runs a builtin when the first word names one (see `run_builtin`
in `minish.builtins`) and otherwise looks the program up with
`find_executable` and runs it through `run_external`, returning the exit
status. When an output stream is passed, the child's standard output is
captured and written to it; otherwise the child inherits the terminal. A
command that is not found reports `NAME: command not found` and gives 127;
a child killed by a signal also gives 127.

The builtins are:

- `cd [DIR]` changes directory (to `$HOME` without an argument) and updates
  `PWD` and `OLDPWD`; a missing directory gives status 127
- `env` prints every entry (only without arguments)
- `export` prints `declare -x` lines, or `export NAME=value` sets a variable
- `unset NAME` removes a variable
- `exit [N]` raises `ShellExit`; with too many arguments, or an argument
  made only of letters, it reports the error and returns 1 or 2 instead

`welcome_banner()` in `minish.executor` returns the coloured start-up
banner as a string.

## Pipelines and here-documents

`minish.pipeline` runs a chain of commands whose standard streams are
connected end to end. Its arguments follow the layout
`prog infile cmd1 cmd2 ... outfile`. An `infile` of `NoIn` gives the first
command no input at all, and an `outfile` of `NoOut` sends the last
command's output to standard output. With `prog here_doc LIMITER cmd1 ...
outfile`, a here-document is read up to the line `LIMITER` first and the
output file is opened for appending.

```python
import os
import sys
from minish.pipeline import parse_pipeline_args, run_pipeline, pipex_main

spec = parse_pipeline_args(["pipex", "NoIn", "ls -l", "wc -l", "NoOut"])
statuses = run_pipeline(spec, dict(os.environ))   # one exit status per command

pipex_main(["pipex", "here_doc", "EOF", "cat", "sort", "sorted.txt"],
           dict(os.environ), sys.stdin)
```

`run_pipeline` raises `PipelineError` when the input file cannot be opened.
A command that cannot be found is skipped and counted as status 0.
`pipex_main` prints such errors and returns 0; it stores the here-document
in a file named `here_doc` in the current directory and removes it
afterwards.

`minish.heredoc` holds the here-document helpers on their own:
`is_heredoc`, `read_heredoc`, `write_heredoc` and `rewrite_heredoc_argv`.

## What the package does not do

- There is no interactive prompt and no command to start one; the caller
  reads lines and passes them to `parse` and `execute`.
- `execute` runs a single command. It does not connect the stages of a
  parsed line that contains `|`, and it does not apply `<`, `>`, `>>` or
  `<<` redirections: tokens that are not plain words are left out of the
  command's arguments. Pipelines with files are run only through
  `minish.pipeline`.
- `echo` and `pwd` are not builtins here; they run as the programs found on
  `PATH`.
- No signal handling (Ctrl-C, Ctrl-\) and no line editing or history.