"""Configuration for the Maven launcher."""

from collections.abc import Sequence

from pydantic import BaseModel


class MavenConfig(BaseModel):
    """Configuration for running Cucumber through ``mvn test``.

    The project's test runner (JUnit Platform suite or Cucumber JUnit) picks
    up the ``cucumber.*`` system properties.
    """

    maven_executable: str = "mvn"
    goals: Sequence[str] = ("test",)
    glue: Sequence[str] = ()
    object_factory: str | None = None
    extra_args: Sequence[str] = ()
