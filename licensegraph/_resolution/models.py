"""Data models for resolved dependency graphs."""

from dataclasses import dataclass, field
from typing import Iterator

from packageurl import PackageURL

NPM_ECOSYSTEM = "npm"


@dataclass(frozen=True)
class PackageIdentity:
    """Identity of a resolved package.

    Two identities are equal only when all four fields match. Within a single
    graph the Graph Builder merges on ``(name, version)`` and picks one
    location per pair, so keys of ``DependencyGraph.transitive`` never collide
    on name and version.

    Attributes:
        ecosystem: Package ecosystem identifier (e.g., "npm")
        name: Package name, including the scope for scoped npm packages
        version: Resolved version
        location: Resolved fetch URL or path, empty when unknown
    """

    ecosystem: str
    name: str
    version: str
    location: str = ""

    @property
    def key(self) -> tuple[str, str]:
        """Canonical merge key within one graph."""
        return (self.name, self.version)

    @property
    def purl(self) -> str:
        """Package URL for this identity (e.g., pkg:npm/%40babel/core@7.0.0)."""
        namespace = None
        name = self.name
        if name.startswith("@") and "/" in name:
            namespace, name = name.split("/", 1)
        return PackageURL(
            type=self.ecosystem,
            namespace=namespace,
            name=name,
            version=self.version or None,
        ).to_string()

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class ImportEdge:
    """A parent's request for a package and what it resolved to.

    Attributes:
        requested: The specifier as written by the parent, ``name@range``
            (just ``name`` when the range is unknown)
        resolved: Identity the request resolved to
    """

    requested: str
    resolved: PackageIdentity

    @property
    def target(self) -> str:
        """Name of the requested package."""
        return self.resolved.name


@dataclass
class ResolvedPackage:
    """A node of the output graph with its own direct dependencies."""

    identity: PackageIdentity
    imports: list[ImportEdge] = field(default_factory=list)


@dataclass
class DependencyGraph:
    """Canonical dependency graph of one module.

    Attributes:
        direct: Edges from the module itself to its direct dependencies
        transitive: Every package reachable from the module, keyed by identity
    """

    direct: list[ImportEdge] = field(default_factory=list)
    transitive: dict[PackageIdentity, ResolvedPackage] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.transitive)

    def __iter__(self) -> Iterator[ResolvedPackage]:
        return iter(self.transitive.values())

    def find(self, name: str, version: str) -> ResolvedPackage | None:
        """Find a package by name and version, ignoring its location."""
        for identity, package in self.transitive.items():
            if identity.key == (name, version):
                return package
        return None

    @property
    def is_empty(self) -> bool:
        return not self.direct and not self.transitive
