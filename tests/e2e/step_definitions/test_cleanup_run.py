"""Step definitions for cleanup run scenarios."""

import json
import os
import shlex
import subprocess
import sys
from pathlib import Path

import pytest
from pytest_bdd import given, when, then, scenarios, parsers


def extract_json_from_output(stdout):
    """Extract and parse JSON from command output."""
    lines = stdout.split("\n")
    json_lines = []
    in_json = False

    for line in lines:
        if line.strip().startswith("{"):
            in_json = True
        if in_json:
            json_lines.append(line)
        if in_json and line.strip().endswith("}"):
            break

    if json_lines:
        return json.loads("\n".join(json_lines))
    return None


# Load scenarios from the feature file
scenarios("../features/cleanup_run.feature")


@pytest.fixture
def project_root():
    """Get the path to the project root."""
    return Path(__file__).parent.parent.parent.parent


@pytest.fixture
def work_dir(tmp_path):
    """Working directory of the cleaner process, relative paths start here."""
    return tmp_path


@pytest.fixture
def command_result():
    """Store the result of running a command."""
    return {}


@pytest.fixture
def temp_config_file():
    """Store the config file path."""
    return {}


def run_cleaner(project_root, work_dir, extra_args):
    try:
        result = subprocess.run(
            [sys.executable, "-m", "src.main", *extra_args],
            capture_output=True,
            text=True,
            timeout=30,
            cwd=work_dir,
            env={**os.environ, "PYTHONPATH": str(project_root)},
        )
    except subprocess.TimeoutExpired:
        pytest.fail("Command timed out")
    return {
        "returncode": result.returncode,
        "stdout": result.stdout,
        "stderr": result.stderr,
    }


# Given steps
@given(parsers.parse('a file "{name}" exists'))
def create_file(work_dir, name):
    path = work_dir / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(name)


@given(parsers.parse('a directory tree "{name}" exists'))
def create_directory_tree(work_dir, name):
    root = work_dir / name
    (root / "nested").mkdir(parents=True)
    (root / "top.txt").write_text("top")
    (root / "nested" / "inner.txt").write_text("inner")


@given("I have a config file with content:")
def create_config_file(work_dir, temp_config_file, docstring):
    config_path = work_dir / "cleanup.yaml"
    config_path.write_text(docstring)
    temp_config_file["path"] = config_path


# When steps
@when("I run the cleaner with this config file")
def run_with_config(project_root, work_dir, temp_config_file, command_result):
    command_result.update(
        run_cleaner(project_root, work_dir, ["--config", str(temp_config_file["path"])])
    )


@when(parsers.parse('I run the cleaner with this config file and args "{args}"'))
def run_with_config_and_args(
    project_root, work_dir, temp_config_file, command_result, args
):
    command_result.update(
        run_cleaner(
            project_root,
            work_dir,
            ["--config", str(temp_config_file["path"]), *shlex.split(args)],
        )
    )


# Then steps
@then(parsers.parse("the exit code should be {code:d}"))
def check_exit_code(command_result, code):
    assert command_result["returncode"] == code, (
        f"Expected exit code {code}, got {command_result['returncode']}. "
        f"stdout: {command_result['stdout']}, stderr: {command_result['stderr']}"
    )


@then(parsers.parse('the path "{name}" should not exist'))
def check_path_removed(work_dir, name):
    assert not (work_dir / name).exists()


@then(parsers.parse('the path "{name}" should exist'))
def check_path_kept(work_dir, name):
    assert (work_dir / name).exists()


def read_run_log(work_dir) -> list[str]:
    log_files = sorted((work_dir / "logs").glob("cleanup_log_*.txt"))
    assert len(log_files) == 1, f"Expected one run log, found {log_files}"
    return log_files[0].read_text(encoding="utf-8").splitlines()


@then(parsers.parse("the run log should contain {count:d} lines"))
def check_run_log_length(work_dir, count):
    assert len(read_run_log(work_dir)) == count


@then(parsers.parse('the run log should contain "{text}"'))
def check_run_log_contains(work_dir, text):
    assert any(text in line for line in read_run_log(work_dir))


@then(parsers.parse('the run log should not contain "{text}"'))
def check_run_log_not_contains(work_dir, text):
    assert not any(text in line for line in read_run_log(work_dir))


@then(parsers.parse('the output should contain "{text}"'))
def check_output_contains(command_result, text):
    combined_output = command_result["stdout"] + command_result["stderr"]
    assert text in combined_output, (
        f"Expected text '{text}' not found in output. "
        f"stdout: {command_result['stdout']}, stderr: {command_result['stderr']}"
    )


@then(parsers.parse('the printed config should have "{key}" set to "{value}"'))
def check_printed_config(command_result, key, value):
    config_data = extract_json_from_output(command_result["stdout"])
    if config_data is None:
        pytest.fail(f"No JSON config found in stdout: {command_result['stdout']}")
    assert str(config_data.get(key, "")) == value
