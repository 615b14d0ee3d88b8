"""Pluggable seams around the planner.

StepProvider supplies the language-specific build and deploy steps that go
into every deploy job. Renderer turns a finished Topology into platform
files; no renderer ships with stageplan.

Example:
    >>> from stageplan.providers import GenericStepProvider
    >>> from stageplan.schemas import DetectionResult, Environment
    >>> provider = GenericStepProvider()
    >>> env = Environment(name="dev", type="development")
    >>> steps = provider.deploy_steps(env, DetectionResult(languages=("python",)))
    >>> steps[0].runtime
    'python'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from stageplan.schemas.steps import RunCommand, SetupRuntime, StepIntent

if TYPE_CHECKING:
    from stageplan.schemas.environment import DetectionResult, Environment
    from stageplan.schemas.topology import Topology


class StepProvider(ABC):
    """Source of language-specific deploy steps.

    Implementations must be pure: the same environment and detection result
    always yield the same steps.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name, e.g. 'generic'."""
        ...

    @abstractmethod
    def deploy_steps(
        self, environment: Environment, detection: DetectionResult
    ) -> tuple[StepIntent, ...]:
        """Return the steps that build and ship the application.

        Args:
            environment: Environment being deployed.
            detection: Detected project characteristics.

        Returns:
            Steps in execution order.
        """
        ...


class GenericStepProvider(StepProvider):
    """Step provider covering the common runtimes and web frameworks.

    The first recognized entry in ``detection.frameworks`` selects a
    framework-specific build and deploy path. Without one, the first
    recognized language in ``detection.languages`` selects the toolchain.
    Unknown or missing languages only get the deploy action.
    """

    _FRONTEND = frozenset({"react", "vue", "angular"})
    _NEXTJS = frozenset({"next.js", "nextjs"})
    _NODE_SERVER = frozenset({"express", "fastify", "koa"})
    _PYTHON_WEB = frozenset({"django", "flask", "fastapi"})
    _JAVA_WEB = frozenset({"spring", "spring boot"})

    @property
    def name(self) -> str:
        return "generic"

    def deploy_steps(
        self, environment: Environment, detection: DetectionResult
    ) -> tuple[StepIntent, ...]:
        for framework in detection.frameworks:
            steps = self._framework_steps(framework.strip().lower(), environment)
            if steps:
                return tuple(steps)

        steps = []
        for language in detection.languages:
            toolchain = self._toolchain(language.strip().lower())
            if toolchain:
                steps.extend(toolchain)
                break
        steps.append(self._deploy_action(environment))
        return tuple(steps)

    @staticmethod
    def _deploy_action(
        environment: Environment,
        name: str = "Deploy application",
        command: str = "deploy:application",
        **extra_env: str,
    ) -> RunCommand:
        env = {
            "ENVIRONMENT": environment.name,
            "DEPLOYMENT_URL": environment.variables.get(
                "DEPLOYMENT_URL", f"https://{environment.name}.example.com"
            ),
        }
        env.update(extra_env)
        return RunCommand(name=name, command=command, env=env)

    def _framework_steps(
        self, framework: str, environment: Environment
    ) -> list[StepIntent]:
        node_setup: list[StepIntent] = [
            SetupRuntime(name="Setup Node.js", runtime="node", version="18"),
            RunCommand(name="Install dependencies", command="npm ci"),
        ]

        if framework in self._FRONTEND:
            return [
                *node_setup,
                RunCommand(
                    name="Build application",
                    command="npm run build",
                    env={"NODE_ENV": "production", "APP_ENV": environment.name},
                ),
                self._deploy_action(
                    environment,
                    name="Deploy to static hosting",
                    command="deploy:static-site",
                    FRAMEWORK=framework,
                ),
            ]
        if framework in self._NEXTJS:
            return [
                *node_setup,
                RunCommand(
                    name="Build Next.js application",
                    command="npm run build",
                    env={"NODE_ENV": "production", "NEXT_PUBLIC_ENV": environment.name},
                ),
                self._deploy_action(
                    environment,
                    name="Deploy to Vercel",
                    command="deploy:vercel",
                    VERCEL_ARGS="--prod" if environment.is_production else "--target preview",
                ),
            ]
        if framework in self._NODE_SERVER:
            return [
                *node_setup,
                RunCommand(
                    name="Build application",
                    command="npm run build",
                    env={"NODE_ENV": "production"},
                ),
                self._deploy_action(environment, FRAMEWORK=framework),
            ]
        if framework in self._PYTHON_WEB:
            steps = self._toolchain("python")
            if framework == "django":
                steps.append(
                    RunCommand(
                        name="Run database migrations",
                        command="python manage.py migrate",
                    )
                )
            steps.append(self._deploy_action(environment, FRAMEWORK=framework))
            return steps
        if framework in self._JAVA_WEB:
            return [
                *self._toolchain("java"),
                self._deploy_action(environment, FRAMEWORK=framework),
            ]
        return []

    @staticmethod
    def _toolchain(language: str) -> list[StepIntent]:
        if language == "python":
            return [
                SetupRuntime(name="Setup Python", runtime="python", version="3.11"),
                RunCommand(
                    name="Install dependencies",
                    command="pip install -r requirements.txt",
                ),
            ]
        if language in ("javascript", "typescript"):
            return [
                SetupRuntime(name="Setup Node.js", runtime="node", version="18"),
                RunCommand(name="Install dependencies", command="npm ci"),
                RunCommand(name="Build application", command="npm run build"),
            ]
        if language == "java":
            return [
                SetupRuntime(name="Setup JDK", runtime="java", version="17"),
                RunCommand(
                    name="Build with Maven",
                    command="mvn clean package -DskipTests",
                ),
            ]
        return []


class Renderer(ABC):
    """Turns a Topology into platform-specific files."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Renderer name, e.g. 'github-actions'."""
        ...

    @abstractmethod
    def render(self, topology: Topology) -> dict[str, str]:
        """Render a topology.

        Args:
            topology: Topology to render.

        Returns:
            Mapping of relative file path to file content.
        """
        ...


__all__ = ["GenericStepProvider", "Renderer", "StepProvider"]
