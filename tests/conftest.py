" generic fixtures "
import subprocess
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional

import pytest

from hyprstrap.lib import command
from hyprstrap.lib.manifests import load_profile
from hyprstrap.logging_utils import reset_logging
from hyprstrap.state_store import ensure_defaults


@dataclass
class Response:
    prefix: list
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    times: Optional[int] = None


@dataclass
class CommandRecorder:
    "Stands in for subprocess.run and records every argv"

    calls: list = field(default_factory=list)
    kwargs: list = field(default_factory=list)
    responses: list = field(default_factory=list)

    def respond(self, *prefix, returncode=0, stdout="", stderr="", times=None):
        "Canned result for commands starting with prefix (first match wins)"
        self.responses.append(Response(list(prefix), returncode, stdout, stderr, times))

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        self.kwargs.append(kwargs)
        for resp in self.responses:
            if argv[: len(resp.prefix)] == resp.prefix:
                if resp.times is not None:
                    resp.times -= 1
                    if resp.times == 0:
                        self.responses.remove(resp)
                return subprocess.CompletedProcess(argv, resp.returncode, resp.stdout, resp.stderr)
        return subprocess.CompletedProcess(argv, 0, "", "")

    def starting_with(self, *prefix):
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def programs(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def commands(monkeypatch):
    recorder = CommandRecorder()
    monkeypatch.setattr(command.subprocess, "run", recorder)
    return recorder


@pytest.fixture(autouse=True)
def _logging():
    yield
    reset_logging()


@pytest.fixture
def make_state(tmp_path):
    "Builds a state document with a target mounted at tmp_path"

    def _make(profile="hyprland-swap", dry_run=False, **config):
        state = ensure_defaults({})
        state["config"].update({"dry_run": dry_run, "assume_yes": True, "target_root": str(tmp_path)})
        state["config"].update(config)
        state["profile"] = deepcopy(load_profile(profile))
        state["execution"]["mounts"] = {"target_root": str(tmp_path)}
        return state

    return _make
