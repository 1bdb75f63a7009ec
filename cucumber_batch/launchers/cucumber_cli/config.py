"""Configuration for the Cucumber CLI launcher."""

from collections.abc import Sequence

from pydantic import BaseModel, Field


class CucumberCliConfig(BaseModel):
    """Configuration for running ``io.cucumber.core.cli.Main`` directly.

    The classpath must already be resolved (compiled classes, test classes
    and all dependency jars).
    """

    classpath: Sequence[str] = Field(..., min_length=1)
    glue: Sequence[str] = Field(..., min_length=1)
    java_executable: str = "java"
    vm_args: Sequence[str] = ("-Dfile.encoding=UTF-8",)
    object_factory: str | None = None
    main_class: str = "io.cucumber.core.cli.Main"
