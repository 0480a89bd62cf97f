# control-plane/core/constants.py
"""
Well-known names shared by the subnet control plane
"""

from enum import Enum


SPIDERPOOL_API_GROUP = "spiderpool.spidernet.io"
SPIDERPOOL_API_VERSION = "v1"
SPIDER_FINALIZER = SPIDERPOOL_API_GROUP

SPIDER_SUBNET_KIND = "SpiderSubnet"
SPIDER_SUBNET_PLURAL = "spidersubnets"

# Pod annotations
ANNO_SPIDER_SUBNETS = "ipam.spidernet.io/subnets"
ANNO_SPIDER_SUBNET = "ipam.spidernet.io/subnet"
ANNO_SPIDER_SUBNET_POOL_IP_NUMBER = "ipam.spidernet.io/ippool-ip-number"
ANNO_SPIDER_SUBNET_RECLAIM_IPPOOL = "ipam.spidernet.io/ippool-reclaim"

# Owner reference API versions we follow
APPS_API_VERSION = "apps/v1"
BATCH_API_VERSION = "batch/v1"

IPV4 = 4
IPV6 = 6


class ControllerKind(str, Enum):
    """Workload kinds a pod can resolve to"""
    POD = "Pod"
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    JOB = "Job"
    CRON_JOB = "CronJob"
    DAEMON_SET = "DaemonSet"
    STATEFUL_SET = "StatefulSet"
    UNKNOWN = "Unknown"
