"""Identity of a configuration document: group, version, kind, namespace, name."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_NAMESPACE = "default"

# Kinds that never live in a namespace; their ids ignore namespace entirely.
CLUSTER_SCOPED_KINDS = frozenset(
    {
        "APIService",
        "CSIDriver",
        "CSINode",
        "CertificateSigningRequest",
        "ClusterRole",
        "ClusterRoleBinding",
        "ComponentStatus",
        "CustomResourceDefinition",
        "IngressClass",
        "MutatingWebhookConfiguration",
        "Namespace",
        "Node",
        "PersistentVolume",
        "PodSecurityPolicy",
        "PriorityClass",
        "RuntimeClass",
        "StorageClass",
        "ValidatingWebhookConfiguration",
        "VolumeAttachment",
    }
)


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``apps/v1`` into ``("apps", "v1")`` and ``v1`` into ``("", "v1")``."""
    if not api_version:
        return "", ""
    group, sep, version = api_version.rpartition("/")
    if not sep:
        return "", api_version
    return group, version


@dataclass(frozen=True, slots=True)
class Gvk:
    """Group, version, and kind of a document."""

    group: str = ""
    version: str = ""
    kind: str = ""

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "Gvk":
        group, version = split_api_version(api_version)
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    @property
    def cluster_scoped(self) -> bool:
        return self.kind in CLUSTER_SCOPED_KINDS

    def is_selected(self, selector: "Gvk") -> bool:
        """Return True when every non-empty field of ``selector`` matches."""
        if selector.group and selector.group != self.group:
            return False
        if selector.version and selector.version != self.version:
            return False
        if selector.kind and selector.kind != self.kind:
            return False
        return True

    def __str__(self) -> str:
        parts = [self.kind or "~K"]
        if self.version:
            parts.append(self.version)
        if self.group:
            parts.append(self.group)
        return ".".join(parts)


@dataclass(frozen=True, slots=True)
class ResId:
    """Stable identity used to look documents up in a collection."""

    gvk: Gvk
    name: str = ""
    namespace: str = ""

    @property
    def effective_namespace(self) -> str:
        if self.gvk.cluster_scoped:
            return ""
        return self.namespace or DEFAULT_NAMESPACE

    def equals(self, other: "ResId") -> bool:
        """Compare ids treating an empty namespace as ``default``."""
        return (
            self.gvk == other.gvk
            and self.name == other.name
            and self.effective_namespace == other.effective_namespace
        )

    def short(self) -> str:
        """Return the ``Kind/name`` form used in error messages."""
        return f"{self.gvk.kind or '~K'}/{self.name}"

    def __str__(self) -> str:
        namespace = self.namespace or ("" if self.gvk.cluster_scoped else DEFAULT_NAMESPACE)
        suffix = f".{namespace}" if namespace else ""
        return f"{self.gvk}/{self.name}{suffix}"


__all__ = ["CLUSTER_SCOPED_KINDS", "DEFAULT_NAMESPACE", "Gvk", "ResId", "split_api_version"]
