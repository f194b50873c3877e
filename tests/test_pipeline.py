import io
import os
import shutil

import pytest

from minish.pipeline import (
    PipelineError,
    PipelineSpec,
    find_in_path,
    join_command,
    parse_pipeline_args,
    pipex_main,
    run_pipeline,
)


@pytest.fixture
def env():
    return {"PATH": os.environ.get("PATH", "/usr/bin:/bin")}


def test_parse_plain_arguments():
    spec = parse_pipeline_args(["prog", "in.txt", "cat", "wc -l", "out.txt"])
    assert spec == PipelineSpec(("cat", "wc -l"), "in.txt", "out.txt", False, None)


def test_parse_no_in_no_out():
    spec = parse_pipeline_args(["prog", "NoIn", "cat", "NoOut"])
    assert spec.infile is None
    assert spec.outfile is None
    assert spec.commands == ("cat",)


def test_parse_heredoc():
    spec = parse_pipeline_args(["prog", "here_doc", "END", "cat", "sort", "out"])
    assert spec.limiter == "END"
    assert spec.append is True
    assert spec.infile == "here_doc"
    assert spec.commands == ("cat", "sort")
    assert spec.outfile == "out"


@pytest.mark.parametrize(
    "argv",
    [["prog", "in", "out"], ["prog"], ["prog", "here_doc", "END", "out"]],
)
def test_parse_too_few_arguments(argv):
    with pytest.raises(PipelineError):
        parse_pipeline_args(argv)


def test_join_command():
    assert join_command("ls", "-l") == "ls -l"


def test_find_in_path_finds_program(env):
    found = find_in_path("sh", env)
    assert found.endswith("/sh")
    assert os.access(found, os.X_OK)


def test_find_in_path_ignores_arguments(env):
    found = find_in_path("cat -e", env)
    assert found.endswith("/cat")


def test_find_in_path_unknown(env):
    assert find_in_path("no-such-command-here", env) is None


def test_find_in_path_without_path():
    assert find_in_path("sh", {}) is None


def test_find_in_path_absolute():
    sh = shutil.which("sh")
    assert find_in_path(sh, {}) == sh


def test_run_single_command(tmp_path, env):
    infile = tmp_path / "in.txt"
    outfile = tmp_path / "out.txt"
    infile.write_text("b\na\n")
    spec = PipelineSpec(("sort",), str(infile), str(outfile))
    assert run_pipeline(spec, env) == [0]
    assert outfile.read_text() == "a\nb\n"


def test_run_chain(tmp_path, env):
    infile = tmp_path / "in.txt"
    outfile = tmp_path / "out.txt"
    infile.write_text("hello\n")
    spec = PipelineSpec(("cat", "tr a-z A-Z"), str(infile), str(outfile))
    statuses = run_pipeline(spec, env)
    assert statuses == [0, 0]
    assert outfile.read_text() == "HELLO\n"


def test_run_truncates_output(tmp_path, env):
    infile = tmp_path / "in.txt"
    outfile = tmp_path / "out.txt"
    infile.write_text("new\n")
    outfile.write_text("old content that is longer\n")
    run_pipeline(PipelineSpec(("cat",), str(infile), str(outfile)), env)
    assert outfile.read_text() == "new\n"


def test_run_appends_output(tmp_path, env):
    infile = tmp_path / "in.txt"
    outfile = tmp_path / "out.txt"
    infile.write_text("new\n")
    outfile.write_text("old\n")
    run_pipeline(PipelineSpec(("cat",), str(infile), str(outfile), True), env)
    assert outfile.read_text() == "old\nnew\n"


def test_run_missing_input_creates_output(tmp_path, env):
    outfile = tmp_path / "out.txt"
    spec = PipelineSpec(("cat",), str(tmp_path / "missing"), str(outfile))
    with pytest.raises(PipelineError):
        run_pipeline(spec, env)
    assert outfile.exists()


def test_run_no_input_gives_empty_output(tmp_path, env):
    outfile = tmp_path / "out.txt"
    assert run_pipeline(PipelineSpec(("cat",), None, str(outfile)), env) == [0]
    assert outfile.read_text() == ""


def test_run_to_standard_output(tmp_path, env, capfd):
    infile = tmp_path / "in.txt"
    infile.write_text("shown\n")
    run_pipeline(PipelineSpec(("cat",), str(infile), None), env)
    assert capfd.readouterr().out == "shown\n"


def test_run_without_commands(env):
    with pytest.raises(PipelineError):
        run_pipeline(PipelineSpec(()), env)


def test_pipex_main_heredoc(tmp_path, env, monkeypatch):
    monkeypatch.chdir(tmp_path)
    outfile = tmp_path / "out.txt"
    outfile.write_text("x\n")
    stdin = io.StringIO("hello\nworld\nEND\nignored\n")
    result = pipex_main(["prog", "here_doc", "END", "cat", "out.txt"], env, stdin)
    assert result == 0
    assert outfile.read_text() == "x\nhello\nworld\n"
    assert not (tmp_path / "here_doc").exists()


def test_pipex_main_missing_input(tmp_path, env, capsys):
    outfile = tmp_path / "out.txt"
    argv = ["prog", str(tmp_path / "missing"), "cat", str(outfile)]
    assert pipex_main(argv, env) == 0
    assert "No such file or directory" in capsys.readouterr().out


def test_pipex_main_runs_files(tmp_path, env):
    infile = tmp_path / "in.txt"
    outfile = tmp_path / "out.txt"
    infile.write_text("b\na\n")
    assert pipex_main(["prog", str(infile), "cat", "sort", str(outfile)], env) == 0
    assert outfile.read_text() == "a\nb\n"