"""Typed publish configuration and its loading.

A ``PublishConfig`` is immutable for the lifetime of one publish. It can be
constructed directly or assembled by ``load_publish_config`` from, in order
of increasing precedence: defaults, environment, a TOML file and explicit
overrides (typically CLI flags).

TOML layout::

    [release]
    owner = "remixz"
    repo = "publish-release"
    tag = "v1.2.0"
    assets = ["dist/app.zip", "dist/app.tar.gz"]
    reuse_release = true
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_obj_list, as_str_dict, get_bool, get_str, get_table

__all__ = [
    "DEFAULT_API_ROOT",
    "DEFAULT_CONFIG_FILE",
    "REQUIRED_FIELDS",
    "PublishConfig",
    "ConfigError",
    "load_config_file",
    "load_publish_config",
    "split_repo_slug",
]

DEFAULT_API_ROOT = "https://api.github.com"
DEFAULT_CONFIG_FILE = "publish-release.toml"

# Reported in this order when missing.
REQUIRED_FIELDS = ("token", "repo", "owner", "tag")

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
API_URL_ENV_VAR = "GITHUB_API_URL"

_BOOL_FIELDS = (
    "draft",
    "prerelease",
    "reuse_release",
    "reuse_draft_only",
    "skip_if_published",
    "edit_release",
    "delete_empty_tag",
    "skip_assets_check",
    "skip_duplicated_assets",
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the configuration cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Everything one publish needs, supplied before it starts."""

    token: str = field(default="", repr=False)
    owner: str = ""
    repo: str = ""
    tag: str = ""
    api_root: str = DEFAULT_API_ROOT
    target_commitish: str | None = None
    name: str | None = None
    notes: str | None = None
    draft: bool = False
    prerelease: bool = False
    assets: tuple[str, ...] = ()
    reuse_release: bool = False
    reuse_draft_only: bool = False
    skip_if_published: bool = False
    edit_release: bool = False
    delete_empty_tag: bool = False
    skip_assets_check: bool = False
    skip_duplicated_assets: bool = False

    def missing_required(self) -> tuple[str, ...]:
        """Names of required fields that are empty, in reporting order."""
        return tuple(name for name in REQUIRED_FIELDS if not getattr(self, name))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PublishConfig:
        """Build from a flat mapping (parsed TOML table or merged overrides).

        Raises:
            TypeError: if a flag is not a boolean, or ``assets`` is neither a
                string nor a list of strings.
            ValueError: if ``repo`` is an ``owner/name`` slug naming another
                owner than ``owner``.
        """
        owner = get_str(data, "owner") or ""
        repo = get_str(data, "repo") or ""
        if "/" in repo:
            slug_owner, repo = split_repo_slug(repo)
            if owner and slug_owner and owner != slug_owner:
                raise ValueError(f"owner {owner!r} conflicts with repo {slug_owner}/{repo}")
            owner = owner or slug_owner

        return cls(
            token=get_str(data, "token") or "",
            owner=owner,
            repo=repo,
            tag=get_str(data, "tag") or "",
            api_root=(get_str(data, "api_root") or DEFAULT_API_ROOT).rstrip("/"),
            target_commitish=get_str(data, "target_commitish"),
            name=get_str(data, "name"),
            notes=_get_text(data, "notes"),
            assets=_parse_assets(data.get("assets")),
            **_parse_flags(data),
        )


def split_repo_slug(value: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts; a bare name yields an empty owner."""
    owner, sep, name = value.strip().strip("/").partition("/")
    if not sep:
        return "", owner
    return owner, name


def _get_text(data: Mapping[str, object], key: str) -> str | None:
    # Release notes keep their surrounding whitespace.
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _parse_flags(data: Mapping[str, object]) -> dict[str, bool]:
    flags: dict[str, bool] = {}
    for name in _BOOL_FIELDS:
        if data.get(name) is None:
            flags[name] = False
            continue
        value = get_bool(data, name)
        if value is None:
            raise TypeError(f"{name} must be a boolean, got {data[name]!r}")
        flags[name] = value
    return flags


def _parse_assets(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())

    items = as_obj_list(value)
    if items is None:
        raise TypeError(f"assets must be a list of paths, got {type(value).__name__}")

    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"asset path must be a string, got {item!r}")
        if item.strip():
            out.append(item.strip())
    return tuple(out)


def load_config_file(path: Path) -> Result[StrDict, ConfigError]:
    """Read the ``[release]`` table of a TOML config file."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))

    if "release" not in data:
        return Ok({})
    table = get_table(data, "release")
    if table is None:
        return Err(ConfigError("[release] must be a TOML table", path=path))
    return Ok(table)


def _from_env(env: Mapping[str, str]) -> StrDict:
    out: StrDict = {}
    for var in TOKEN_ENV_VARS:
        token = env.get(var, "").strip()
        if token:
            out["token"] = token
            break
    api_root = env.get(API_URL_ENV_VAR, "").strip()
    if api_root:
        out["api_root"] = api_root
    return out


def load_publish_config(
    *,
    path: Path | None = None,
    overrides: Mapping[str, object] | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[PublishConfig, ConfigError]:
    """Assemble a PublishConfig from environment, config file and overrides.

    Args:
        path: Optional TOML file; a missing file is an error only when given
        overrides: Highest-precedence values; ``None`` entries are ignored
        env: Environment mapping (defaults to nothing, so tests stay hermetic)

    Returns:
        Ok(PublishConfig), or Err(ConfigError) when the file or values are invalid
    """
    merged: StrDict = _from_env(env or {})

    if path is not None:
        file_result = load_config_file(path)
        if isinstance(file_result, Err):
            return file_result
        merged.update(file_result.value)

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return Ok(PublishConfig.from_dict(merged))
    except (TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config value: {e}", path=path))
