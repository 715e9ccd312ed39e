"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TESTCARVE__SECTION__KEY)
3. YAML file passed with --config
4. Global YAML (~/.config/testcarve/config.yaml)
5. Built-in defaults (this file)

Examples:
    TESTCARVE__LOGGING__LEVEL=DEBUG
    TESTCARVE__COMPILER__JAVA_HOME=/usr/lib/jvm/java-17
    TESTCARVE__COMPILER__KEEP_GOING=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TESTCARVE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every oracle invocation and bridge.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CompilerConfig(BaseModel):
    """Java compiler used as the dependency oracle.

    Env vars:
        TESTCARVE__COMPILER__JAVAC: javac executable name or path
        TESTCARVE__COMPILER__JAVA_HOME: JDK home; overrides JAVAC with <home>/bin/javac
        TESTCARVE__COMPILER__TIMEOUT_SEC: Optional per-invocation bound
    """

    javac: str = Field(default="javac", description="javac executable name or path.")
    java_home: str | None = Field(
        default=None,
        description="JDK home directory. When set, <java_home>/bin/javac is used.",
    )
    extra_args: list[str] = Field(
        default_factory=list,
        description="Additional javac arguments, inserted before the entry units.",
    )
    keep_going: bool = Field(
        default=True,
        description="Keep attributing after errors so unresolved symbols do not hide "
        "later file reads.",
    )
    encoding: str | None = Field(default=None, description="Source encoding (-encoding).")
    timeout_sec: float | None = Field(
        default=None,
        description="Per-invocation timeout. An expired call contributes nothing.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"timeout_sec must be positive, got {v}")
        return v

    @property
    def executable(self) -> str:
        if self.java_home:
            return str(Path(self.java_home).expanduser() / "bin" / "javac")
        return self.javac


class LayoutConfig(BaseModel):
    """Corpus naming conventions."""

    source_ext: str = ".java"
    native_ext: str = ".c"
    script_exts: list[str] = Field(default_factory=lambda: [".ksh"])
    page_ext: str = ".html"
    module_descriptor: str = "module-info.java"
    module_prefix: str = "jck."
    module_suffix: str = ".module"
    launcher_pattern: str = Field(
        default="bin/java",
        description="Substring identifying the runtime launcher line in test scripts.",
    )
    stub_class: str = "DummyExtractorClass"
    native_dir: str = Field(default="share", description="Shared native sources under src/.")

    @field_validator("source_ext", "native_ext", "page_ext")
    @classmethod
    def validate_ext(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError(f"Extension must start with '.': {v}")
        return v

    @field_validator("stub_class")
    @classmethod
    def validate_stub_class(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Stub class must be a plain identifier: {v}")
        return v


class CarveConfig(BaseModel):
    """Root configuration for testcarve."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
