# control-plane/core/naming.py
"""
Auto-created IPPool naming

The name is a pure function of the workload identity, so concurrent
reconcilers always agree on it without a shared counter.
"""

from typing import Tuple


def subnet_pool_name(
    controller_kind: str,
    controller_namespace: str,
    controller_name: str,
    ip_version: int,
    interface_name: str,
    controller_uid: str
) -> str:
    """
    Name of the auto-created IPPool for one workload, interface and IP version

    The UID contributes only its last hyphen-separated group
    ("xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx" -> "xxxxxxxxxxxx").

    Example:
        >>> subnet_pool_name("Deployment", "default", "nginx", 4, "eth0",
        ...                  "2f4a53c1-0a3e-4c5e-9d7b-7e6f0ab12cd3")
        'auto-deployment-default-nginx-v4-eth0-7e6f0ab12cd3'
    """
    uid_tail = str(controller_uid).split("-")[-1]

    return "auto-{}-{}-{}-v{}-{}-{}".format(
        controller_kind.lower(),
        controller_namespace.lower(),
        controller_name.lower(),
        ip_version,
        interface_name,
        uid_tail.lower(),
    )


def app_label_value(app_kind: str, app_namespace: str, app_name: str) -> str:
    """
    Join an application's kind, namespace and name into one label value

    Namespaces and object names never contain '_', while label values may,
    so the value can be split back with parse_app_label_value.
    """
    return f"{app_kind}_{app_namespace}_{app_name}"


def parse_app_label_value(value: str) -> Tuple[str, str, str, bool]:
    """Inverse of app_label_value, returns (kind, namespace, name, found)"""
    app_kind, sep, rest = value.partition("_")
    if not sep:
        return "", "", "", False

    app_namespace, _, app_name = rest.partition("_")
    return app_kind, app_namespace, app_name, True
