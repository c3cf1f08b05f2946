"""
The template: resources, the edges between them, and the order to emit them in.
"""
import pulumi

from .errors import (
    CollisionError, CyclicDependencyError, TemplateStateError, UnresolvedReferenceError,
)
from .ids import IdAllocator
from .resources import (
    Resource, StorageBucket, AccessRole, DeliveryStream, ComputeHook,
)

__all__ = 'Template', 'BUILDING', 'FINALIZING', 'FINALIZED', 'REJECTED',

BUILDING = 'building'
FINALIZING = 'finalizing'
FINALIZED = 'finalized'
REJECTED = 'rejected'


class Template:
    """
    A deployment description under construction.

    Resources go in with add_*(); finalize() checks every reference, orders
    everything so a resource comes after whatever it refers to, and freezes the
    template. Not safe to build from several threads at once.
    """
    def __init__(self, description=None, *, dry_run=False):
        self.description = description
        self.dry_run = dry_run
        self.ids = IdAllocator()
        self.state = BUILDING
        self.order = None
        self.error = None
        self._resources = {}
        self._retain = {}
        self._explicit = []

    def __contains__(self, logical_id):
        return logical_id in self._resources

    def __len__(self):
        return len(self._resources)

    def __getitem__(self, logical_id):
        return self._resources[logical_id]

    def __iter__(self):
        return iter(self._resources)

    def __repr__(self):
        return f"<Template {self.state} with {len(self)} resources>"

    @property
    def resources(self):
        return dict(self._resources)

    @property
    def explicit_edges(self):
        return list(self._explicit)

    def retained(self, logical_id):
        return self._retain[logical_id]

    def _check_building(self):
        if self.state != BUILDING:
            raise TemplateStateError(f"Template is {self.state}; it can no longer be changed")

    # Assembly

    def add_resource(self, logical_id, resource, retain=None):
        """
        Insert resource under logical_id. retain defaults to the resource's own
        lifecycle decision.
        """
        self._check_building()
        if not isinstance(resource, Resource):
            raise TypeError(f"Expected a Resource, got {resource!r}")
        if logical_id in self._resources:
            raise CollisionError(f"{logical_id} is already in the template")
        if logical_id not in self.ids:
            self.ids.reserve(logical_id, resource.kind)
        self._resources[logical_id] = resource
        self._retain[logical_id] = resource.retain if retain is None else bool(retain)
        pulumi.debug(f"Added {resource.kind} {logical_id}")

    def add_explicit_dependency(self, from_, to):
        """
        Require from_ to be realized after to, beyond what references imply.
        """
        self._check_building()
        edge = (from_, to)
        if edge not in self._explicit:
            self._explicit.append(edge)

    # Builders: allocate an ID, construct, insert. Returns the ID.

    def add_bucket(self, seed, *, retain, versioning='Enabled'):
        bucket = StorageBucket(retain=retain, versioning=versioning)
        return self._add(seed, bucket)

    def add_role(self, seed, *, assume, policies=None):
        role = AccessRole(assume=assume, policies=policies)
        return self._add(seed, role)

    def add_delivery_stream(self, seed, *, bucket, role, interval, size,
                            compression='UNCOMPRESSED', prefix='', processor=None):
        stream = DeliveryStream(
            bucket=bucket, role=role, interval=interval, size=size,
            compression=compression, prefix=prefix, processor=processor,
        )
        return self._add(seed, stream)

    def add_hook(self, hook):
        """
        Register an externally defined function under its own logical ID.
        """
        if not isinstance(hook, ComputeHook):
            hook = ComputeHook(hook)
        self._check_building()
        resource = hook.resource()
        self.ids.reserve(hook.logical_id, resource.kind)
        self.add_resource(hook.logical_id, resource)
        return hook.logical_id

    def _add(self, seed, resource):
        self._check_building()
        logical_id = self.ids.allocate(seed, resource.kind)
        self.add_resource(logical_id, resource)
        return logical_id

    # Graph

    def dependencies_of(self, logical_id):
        """
        IDs logical_id must come after, in first-seen order
        """
        deps = []
        for ref in self._resources[logical_id].references():
            if ref.target not in deps:
                deps.append(ref.target)
        for from_, to in self._explicit:
            if from_ == logical_id and to not in deps:
                deps.append(to)
        return deps

    def edges(self):
        """
        Every (from, to) edge, implied and explicit
        """
        return [
            (lid, dep)
            for lid in self._resources
            for dep in self.dependencies_of(lid)
        ]

    def _check_targets(self):
        for lid, resource in self._resources.items():
            for ref in resource.references():
                if ref.target not in self._resources:
                    raise UnresolvedReferenceError(lid, ref.target)
        for from_, to in self._explicit:
            for end in (from_, to):
                if end not in self._resources:
                    raise UnresolvedReferenceError(f"Explicit dependency {from_} -> {to}", end)

    def _find_cycle(self, remaining, deps):
        # Every node left after Kahn's algorithm is on or behind a cycle, so
        # walking dependencies from any of them has to revisit a node.
        start = next(lid for lid in self._resources if lid in remaining)
        path = []
        seen = {}
        node = start
        while node not in seen:
            seen[node] = len(path)
            path.append(node)
            node = next(d for d in deps[node] if d in remaining)
        return path[seen[node]:] + [node]

    def _on_cycles(self, remaining, deps):
        # Nodes left over can also just be waiting behind a loop; keep the ones
        # that can reach themselves.
        members = []
        for lid in self._resources:
            if lid not in remaining:
                continue
            stack = [d for d in deps[lid] if d in remaining]
            seen = set()
            while stack:
                node = stack.pop()
                if node == lid:
                    members.append(lid)
                    break
                if node not in seen:
                    seen.add(node)
                    stack.extend(d for d in deps[node] if d in remaining)
        return members

    def _sort(self):
        deps = {lid: self.dependencies_of(lid) for lid in self._resources}
        waiting = {lid: len(set(d)) for lid, d in deps.items()}
        dependents = {lid: [] for lid in self._resources}
        for lid, ds in deps.items():
            for d in set(ds):
                dependents[d].append(lid)

        position = {lid: i for i, lid in enumerate(self._resources)}
        ready = [lid for lid in self._resources if waiting[lid] == 0]
        order = []
        while ready:
            # Ties go to whatever was added first
            ready.sort(key=position.__getitem__)
            lid = ready.pop(0)
            order.append(lid)
            for dependent in dependents[lid]:
                waiting[dependent] -= 1
                if waiting[dependent] == 0:
                    ready.append(dependent)

        if len(order) != len(self._resources):
            remaining = set(self._resources) - set(order)
            raise CyclicDependencyError(
                self._find_cycle(remaining, deps),
                self._on_cycles(remaining, deps),
            )
        return order

    def finalize(self):
        """
        Validate and order the template. On success the template is frozen and
        returned; on failure it's rejected and the error re-raised.
        """
        self._check_building()
        self.state = FINALIZING
        try:
            self._check_targets()
            order = self._sort()
        except Exception as exc:
            self.state = REJECTED
            self.error = exc
            raise
        self.order = order
        self.state = FINALIZED
        pulumi.info(
            f"Finalized template with {len(order)} resources: {', '.join(order)}"
        )
        return self

    def ordered_resources(self):
        if self.state != FINALIZED:
            raise TemplateStateError(f"Template is {self.state}, not finalized")
        return [(lid, self._resources[lid]) for lid in self.order]
