"""
Tests for the prerequisite resolver — evaluation, check-only mode, and
the interactive install flow.

Checkers and installers are injected; the host is never touched.
"""

from setulab.adapters.mock import MockRuntime
from setulab.core.models.prereq import (
    OSProfile,
    RequirementStatus,
    ToolCheck,
    ToolRequirement,
)
from setulab.core.services.prereq.resolver import (
    DEFAULT_REQUIREMENTS,
    evaluate,
    resolve,
    verify_runtime,
)

DOCKER = ToolRequirement(
    tool="docker", label="Docker", min_version="20.10", install_recipe="docker",
    docs_url="https://docs.docker.com/engine/install/",
)
JQ = ToolRequirement(tool="jq", label="jq", required=False, purpose="useful for JSON processing")
TASK = ToolRequirement(tool="task", label="Task", required=False, install_recipe="task")


class FakeHost:
    """Installed tool table shared by the fake checker and installer."""

    def __init__(self, **installed: str | None):
        self.installed = dict(installed)
        self.install_calls: list[str] = []
        self.install_result: dict | None = None
        self.install_sets: dict[str, str] = {}

    def check(self, tool: str) -> ToolCheck:
        if tool not in self.installed:
            return ToolCheck(installed=False)
        return ToolCheck(installed=True, version=self.installed[tool])

    def install(self, recipe: str, profile: OSProfile) -> dict:
        self.install_calls.append(recipe)
        if self.install_result is not None:
            return self.install_result
        if recipe in self.install_sets:
            self.installed[recipe] = self.install_sets[recipe]
        return {"ok": True, "notes": ["Or run: newgrp docker"]}


class Answers:
    def __init__(self, answer: bool):
        self.answer = answer
        self.questions: list[str] = []

    def __call__(self, question: str, default: bool) -> bool:
        self.questions.append(question)
        return self.answer


# ── Evaluation ──────────────────────────────────────────────────────


class TestEvaluate:
    def test_satisfied(self):
        result = evaluate(DOCKER, checker=FakeHost(docker="24.0.7").check)
        assert result.status == RequirementStatus.SATISFIED
        assert result.version == "24.0.7"

    def test_exact_floor_satisfies(self):
        result = evaluate(DOCKER, checker=FakeHost(docker="20.10.0").check)
        assert result.satisfied

    def test_below_minimum(self):
        result = evaluate(DOCKER, checker=FakeHost(docker="19.03.12").check)
        assert result.status == RequirementStatus.BELOW_MINIMUM
        assert result.version == "19.03.12"

    def test_missing(self):
        result = evaluate(DOCKER, checker=FakeHost().check)
        assert result.status == RequirementStatus.MISSING

    def test_unknown_version_with_floor(self):
        result = evaluate(DOCKER, checker=FakeHost(docker=None).check)
        assert result.status == RequirementStatus.BELOW_MINIMUM
        assert "could not be determined" in result.notes[-1]

    def test_no_floor_any_version(self):
        result = evaluate(JQ, checker=FakeHost(jq=None).check)
        assert result.satisfied

    def test_variant_noted_first(self):
        def checker(tool):
            return ToolCheck(installed=True, version="1.29.2", variant="standalone",
                             notes=["Consider upgrading to Docker Compose v2 (plugin)"])
        req = ToolRequirement(tool="docker-compose", min_version="2.0")
        result = evaluate(req, checker=checker)
        assert result.status == RequirementStatus.BELOW_MINIMUM
        assert result.notes[0] == "standalone variant"


# ── Check-only ──────────────────────────────────────────────────────


class TestCheckOnly:
    def test_never_installs(self, ubuntu: OSProfile):
        host = FakeHost()
        answers = Answers(True)
        report = resolve(
            [DOCKER, TASK], os_profile=ubuntu, confirm=answers,
            checker=host.check, installer=host.install,
        )
        assert host.install_calls == []
        assert answers.questions == []
        assert not report.interactive
        assert report.get("docker").status == RequirementStatus.MISSING
        assert "Docker >= 20.10 is required" in report.get("docker").guidance

    def test_optional_missing_keeps_required_ok(self, ubuntu: OSProfile):
        host = FakeHost(docker="24.0.7")
        report = resolve([DOCKER, JQ], os_profile=ubuntu, checker=host.check)
        assert report.required_ok
        assert not report.ok
        assert report.get("jq").guidance == "jq is not installed (useful for JSON processing)"

    def test_optional_below_minimum_guidance(self, ubuntu: OSProfile):
        jq = ToolRequirement(
            tool="jq", label="jq", required=False, min_version="1.6",
            purpose="useful for JSON processing",
        )
        host = FakeHost(jq="1.5")
        result = resolve([jq], os_profile=ubuntu, checker=host.check).get("jq")
        assert result.status == RequirementStatus.BELOW_MINIMUM
        assert result.guidance == "jq 1.6 or newer is recommended (found 1.5)"

    def test_optional_unknown_version_guidance(self, ubuntu: OSProfile):
        jq = ToolRequirement(tool="jq", label="jq", required=False, min_version="1.6")
        host = FakeHost(jq=None)
        result = resolve([jq], os_profile=ubuntu, checker=host.check).get("jq")
        assert "not installed" not in result.guidance
        assert "found unknown version" in result.guidance

    def test_order_preserved(self, ubuntu: OSProfile):
        host = FakeHost(docker="24.0.7", jq="1.6")
        report = resolve([JQ, DOCKER], os_profile=ubuntu, checker=host.check)
        assert [r.requirement.tool for r in report.results] == ["jq", "docker"]


# ── Interactive ─────────────────────────────────────────────────────


class TestInteractive:
    def test_accept_installs_and_rechecks(self, ubuntu: OSProfile):
        host = FakeHost()
        host.install_sets["docker"] = "24.0.7"
        answers = Answers(True)
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=answers,
            checker=host.check, installer=host.install,
        )
        result = report.get("docker")
        assert answers.questions == ["Docker is required. Do you want to install it?"]
        assert result.satisfied
        assert result.install_attempted
        assert "Or run: newgrp docker" in result.notes
        assert report.installed_any

    def test_decline(self, ubuntu: OSProfile):
        host = FakeHost()
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=Answers(False),
            checker=host.check, installer=host.install,
        )
        result = report.get("docker")
        assert host.install_calls == []
        assert result.status == RequirementStatus.MISSING
        assert result.install_declined
        assert not report.required_ok

    def test_install_failure(self, ubuntu: OSProfile):
        host = FakeHost()
        host.install_result = {
            "ok": False, "error": "Unsupported OS: alpine",
            "guidance": "Please install Docker manually from: https://docs.docker.com/engine/install/",
        }
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=Answers(True),
            checker=host.check, installer=host.install,
        )
        result = report.get("docker")
        assert result.status == RequirementStatus.INSTALL_FAILED
        assert result.install_error == "Unsupported OS: alpine"
        assert result.guidance.startswith("Please install Docker manually")

    def test_installed_but_still_too_old(self, ubuntu: OSProfile):
        host = FakeHost(docker="19.03.12")
        host.install_sets["docker"] = "19.03.12"
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=Answers(True),
            checker=host.check, installer=host.install,
        )
        result = report.get("docker")
        assert result.status == RequirementStatus.INSTALL_FAILED
        assert "still below_minimum" in result.install_error

    def test_optional_question(self, ubuntu: OSProfile):
        answers = Answers(False)
        resolve(
            [TASK], interactive=True, os_profile=ubuntu, confirm=answers,
            checker=FakeHost().check, installer=FakeHost().install,
        )
        assert answers.questions == ["Task is optional but recommended. Do you want to install it?"]

    def test_no_recipe_no_prompt(self, ubuntu: OSProfile):
        answers = Answers(True)
        report = resolve(
            [JQ], interactive=True, os_profile=ubuntu, confirm=answers,
            checker=FakeHost().check,
        )
        assert answers.questions == []
        assert report.get("jq").status == RequirementStatus.MISSING

    def test_satisfied_not_offered_without_force(self, ubuntu: OSProfile):
        answers = Answers(True)
        host = FakeHost(docker="24.0.7")
        resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=answers,
            checker=host.check, installer=host.install,
        )
        assert answers.questions == []
        assert host.install_calls == []

    def test_force_offers_reinstall(self, ubuntu: OSProfile):
        answers = Answers(True)
        host = FakeHost(docker="24.0.7")
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, confirm=answers, force=True,
            checker=host.check, installer=host.install,
        )
        assert answers.questions == ["Docker is already installed. Reinstall it?"]
        assert host.install_calls == ["docker"]
        assert report.get("docker").satisfied

    def test_default_answer_without_confirm(self, ubuntu: OSProfile):
        host = FakeHost()
        host.install_sets["docker"] = "24.0.7"
        report = resolve(
            [DOCKER], interactive=True, os_profile=ubuntu, default_answer=True,
            checker=host.check, installer=host.install,
        )
        assert report.get("docker").satisfied


# ── Defaults and runtime check ──────────────────────────────────────


class TestDefaults:
    def test_default_requirements(self):
        by_tool = {r.tool: r for r in DEFAULT_REQUIREMENTS}
        assert list(by_tool) == ["docker", "docker-compose", "task", "curl", "git", "jq"]
        assert by_tool["docker"].min_version == "20.10"
        assert by_tool["docker-compose"].min_version == "2.0"
        assert [r.tool for r in DEFAULT_REQUIREMENTS if r.required] == ["docker", "docker-compose"]
        assert by_tool["task"].install_recipe == "task"
        assert by_tool["jq"].install_recipe is None

    def test_report_dict(self, ubuntu: OSProfile):
        report = resolve([DOCKER], os_profile=ubuntu, checker=FakeHost(docker="24.0.7").check)
        data = report.to_dict()
        assert data["required_ok"] is True
        assert data["os"]["distro_id"] == "ubuntu"
        assert data["requirements"][0]["status"] == "satisfied"


class TestVerifyRuntime:
    def test_runs_hello_world(self):
        runtime = MockRuntime()
        receipt = verify_runtime(runtime)
        assert receipt.ok
        assert runtime.calls("run") == ["hello-world"]

    def test_failure_reported(self):
        runtime = MockRuntime()
        runtime.set_failure("run", error="pull access denied")
        receipt = verify_runtime(runtime)
        assert receipt.failed
        assert receipt.error == "pull access denied"
