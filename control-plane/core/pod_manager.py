# control-plane/core/pod_manager.py
"""
Pod Manager - resolves a pod's top controller through its owner references
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from kubernetes.client.exceptions import ApiException

from .constants import ControllerKind, APPS_API_VERSION, BATCH_API_VERSION
from .exceptions import OwnerLookupError
from .logutils import LoggerLike


@dataclass
class PodTopController:
    """
    Highest resolvable owner of a pod

    `app` is the fetched kubernetes object, or None when the owner is a
    third party (Unknown) controller.
    """
    kind: ControllerKind
    namespace: str
    name: str
    uid: str
    app: Optional[Any] = None


def get_controller_of(obj: Any) -> Optional[Any]:
    """The owner reference flagged controller=true, like metav1.GetControllerOf"""
    owner_references = obj.metadata.owner_references or []
    for ref in owner_references:
        if ref.controller:
            return ref
    return None


class PodManager:
    """
    Pod lookups and owner graph traversal

    Walks at most three hops (pod -> ReplicaSet -> Deployment, or
    pod -> Job -> CronJob), with no caching between calls. A missing owner
    surfaces as OwnerLookupError rather than a stale or Unknown answer.
    """

    def __init__(self, store):
        """
        Args:
            store: Object store exposing get_pod/list_pods and the
                   get_<workload>(namespace, name) readers
        """
        if store is None:
            raise ValueError("k8s object store is a required parameter")
        self.store = store

    def get_pod_by_name(self, namespace: str, name: str) -> Any:
        return self.store.get_pod(namespace, name)

    def list_pods(self, namespace: Optional[str] = None, label_selector: Optional[str] = None) -> List[Any]:
        return self.store.list_pods(namespace=namespace, label_selector=label_selector)

    def _fetch(self, pod: Any, getter, namespace: str, name: str) -> Any:
        try:
            return getter(namespace, name)
        except ApiException as e:
            raise OwnerLookupError(pod.metadata.namespace, pod.metadata.name, e) from e

    def get_pod_top_controller(self, pod: Any, log: LoggerLike) -> PodTopController:
        """
        Find the workload that ultimately owns the pod

        A Deployment's pods resolve to the Deployment, a CronJob's pods to the
        CronJob. Owners outside the apps/batch groups, and intermediate owners
        of unsupported kinds, resolve to Unknown without being fetched.

        Raises:
            OwnerLookupError: an owner object could not be fetched
        """
        namespace = pod.metadata.namespace
        pod_owner = get_controller_of(pod)
        if pod_owner is None:
            return PodTopController(
                kind=ControllerKind.POD,
                namespace=namespace,
                name=pod.metadata.name,
                uid=pod.metadata.uid,
                app=pod,
            )

        # third party controller
        if pod_owner.api_version not in (APPS_API_VERSION, BATCH_API_VERSION):
            return PodTopController(
                kind=ControllerKind.UNKNOWN,
                namespace=namespace,
                name=pod_owner.name,
                uid=pod_owner.uid,
            )

        if pod_owner.kind == ControllerKind.REPLICA_SET.value:
            replica_set = self._fetch(pod, self.store.get_replica_set, namespace, pod_owner.name)
            return self._resolve_second_hop(
                pod, replica_set, ControllerKind.REPLICA_SET,
                ControllerKind.DEPLOYMENT, self.store.get_deployment, log,
            )

        if pod_owner.kind == ControllerKind.JOB.value:
            job = self._fetch(pod, self.store.get_job, namespace, pod_owner.name)
            return self._resolve_second_hop(
                pod, job, ControllerKind.JOB,
                ControllerKind.CRON_JOB, self.store.get_cron_job, log,
            )

        if pod_owner.kind == ControllerKind.DAEMON_SET.value:
            daemon_set = self._fetch(pod, self.store.get_daemon_set, namespace, pod_owner.name)
            return _top_controller(ControllerKind.DAEMON_SET, daemon_set)

        if pod_owner.kind == ControllerKind.STATEFUL_SET.value:
            stateful_set = self._fetch(pod, self.store.get_stateful_set, namespace, pod_owner.name)
            return _top_controller(ControllerKind.STATEFUL_SET, stateful_set)

        log.warning(
            f"the controller type '{pod_owner.kind}' of pod "
            f"'{namespace}/{pod.metadata.name}' is unknown"
        )
        return PodTopController(
            kind=ControllerKind.UNKNOWN,
            namespace=namespace,
            name=pod_owner.name,
            uid=pod_owner.uid,
        )

    def _resolve_second_hop(
        self,
        pod: Any,
        owner: Any,
        owner_kind: ControllerKind,
        parent_kind: ControllerKind,
        parent_getter,
        log: LoggerLike
    ) -> PodTopController:
        """ReplicaSet -> Deployment and Job -> CronJob"""
        parent_ref = get_controller_of(owner)
        if parent_ref is None:
            return _top_controller(owner_kind, owner)

        if parent_ref.kind == parent_kind.value:
            parent = self._fetch(pod, parent_getter, owner.metadata.namespace, parent_ref.name)
            return _top_controller(parent_kind, parent)

        log.warning(
            f"the controller type '{parent_ref.kind}' of pod "
            f"'{pod.metadata.namespace}/{pod.metadata.name}' is unknown"
        )
        return PodTopController(
            kind=ControllerKind.UNKNOWN,
            namespace=owner.metadata.namespace,
            name=parent_ref.name,
            uid=parent_ref.uid,
        )


def _top_controller(kind: ControllerKind, app: Any) -> PodTopController:
    return PodTopController(
        kind=kind,
        namespace=app.metadata.namespace,
        name=app.metadata.name,
        uid=app.metadata.uid,
        app=app,
    )
