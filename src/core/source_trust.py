"""Source trust priors for quality scoring.

This module loads per-source trust priors from an optional YAML file
and falls back to built-in priors for well-known publishers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import DEFAULT_SOURCE_PRIOR
from core.errors import CorpusConfigError

_DEFAULT_VERIFIED_ORGANIZATIONS = (
    "united nations",
    "unrwa",
    "ocha",
    "world health organization",
    "who",
    "world bank",
    "unicef",
    "wfp",
)
_DEFAULT_SOURCE_PRIORS: Mapping[str, float] = {
    "who": 0.9,
    "unrwa": 0.9,
    "ocha": 0.9,
    "hdx": 0.8,
    "world bank": 0.85,
    "pcbs": 0.85,
    "acled": 0.8,
    "btselem": 0.75,
    "techforpalestine": 0.7,
    "goodshepherd": 0.6,
}
_ROOT_KEYS = {"default_prior", "sources", "verified_organizations"}


@dataclass(frozen=True)
class SourceTrust:
    """Trust prior and verification flag for one source."""

    prior: float
    verified: bool


@dataclass(frozen=True)
class SourceTrustTable:
    """Lookup table of source trust priors.

    Attributes:
        default_prior: Prior used for sources without an entry.
        priors: Prior by lowercase source name.
        verified_sources: Lowercase source names marked verified.
        verified_organizations: Lowercase organization keywords that verify a source.
    """

    default_prior: float = DEFAULT_SOURCE_PRIOR
    priors: Mapping[str, float] = field(default_factory=lambda: dict(_DEFAULT_SOURCE_PRIORS))
    verified_sources: frozenset[str] = frozenset()
    verified_organizations: tuple[str, ...] = _DEFAULT_VERIFIED_ORGANIZATIONS

    def lookup(self, source_name: str, organization: str) -> SourceTrust:
        """Resolve the trust prior for a source.

        Args:
            source_name: Source short name.
            organization: Publishing organization.

        Returns:
            Trust prior and verification flag.
        """
        name_key = source_name.strip().lower()
        prior = self.priors.get(name_key, self.default_prior)
        verified = name_key in self.verified_sources or _matches_organization(
            organization, self.verified_organizations
        )
        return SourceTrust(prior=prior, verified=verified)


def load_source_trust_table(trust_file: Path | None) -> SourceTrustTable:
    """Load a trust table from YAML, or return built-in defaults.

    Args:
        trust_file: Optional YAML file path.

    Returns:
        Source trust table.

    Raises:
        CorpusConfigError: If the file is missing, unreadable, or invalid.
    """
    if trust_file is None:
        return SourceTrustTable()
    payload = _load_yaml_mapping(trust_file)
    unknown_keys = sorted(set(payload) - _ROOT_KEYS)
    if unknown_keys:
        raise CorpusConfigError(
            f"Unsupported keys in source trust file {trust_file}: {', '.join(unknown_keys)}. "
            f"Use only: {', '.join(sorted(_ROOT_KEYS))}."
        )
    default_prior = _parse_prior(
        payload.get("default_prior", DEFAULT_SOURCE_PRIOR), "default_prior"
    )
    priors = dict(_DEFAULT_SOURCE_PRIORS)
    verified_sources: set[str] = set()
    for source_name, entry in _expect_mapping(payload.get("sources", {}), "sources").items():
        entry_mapping = _expect_mapping(entry, f"sources.{source_name}")
        key = str(source_name).strip().lower()
        priors[key] = _parse_prior(entry_mapping.get("prior", default_prior), f"{key}.prior")
        if entry_mapping.get("verified") is True:
            verified_sources.add(key)
    organizations = payload.get("verified_organizations")
    verified_organizations = (
        _parse_organizations(organizations)
        if organizations is not None
        else _DEFAULT_VERIFIED_ORGANIZATIONS
    )
    return SourceTrustTable(
        default_prior=default_prior,
        priors=priors,
        verified_sources=frozenset(verified_sources),
        verified_organizations=verified_organizations,
    )


def _load_yaml_mapping(trust_file: Path) -> Mapping[str, object]:
    if not trust_file.exists():
        raise CorpusConfigError(
            f"Source trust file does not exist at {trust_file}. "
            "Fix HUMCORPUS_SOURCE_TRUST_FILE or unset it to use defaults."
        )
    try:
        payload = cast(object, yaml.safe_load(trust_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise CorpusConfigError(
            f"Failed to read source trust file at {trust_file}: {error}."
        ) from error
    except yaml.YAMLError as error:
        raise CorpusConfigError(
            f"Failed to parse YAML source trust file at {trust_file}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        return {}
    return _expect_mapping(payload, "source trust root")


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return {str(key): item for key, item in value.items()}
    raise CorpusConfigError(
        f"Invalid {context} in source trust file: expected mapping, got {type(value).__name__}."
    )


def _parse_prior(value: object, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CorpusConfigError(f"Source trust field '{context}' must be numeric.")
    prior = float(value)
    if not 0.0 <= prior <= 1.0:
        raise CorpusConfigError(
            f"Source trust field '{context}' must lie in [0, 1], got {prior}."
        )
    return prior


def _parse_organizations(value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise CorpusConfigError(
            "Source trust field 'verified_organizations' must be a list of strings."
        )
    return tuple(item.strip().lower() for item in value if item.strip())


def _matches_organization(organization: str, keywords: tuple[str, ...]) -> bool:
    """Return whether an organization name matches a verified keyword.

    Short keywords such as ``who`` must match a whole word.
    """
    normalized = organization.strip().lower()
    if not normalized:
        return False
    words = set(normalized.replace("(", " ").replace(")", " ").split())
    for keyword in keywords:
        if " " in keyword and keyword in normalized:
            return True
        if keyword in words:
            return True
    return False
