"""Environment variable names and defaults shared across hostpool."""

# Configuration layer
ENV_DEFAULT_HOSTFILE = 'HOSTPOOL_DEFAULT_HOSTFILE'
ENV_RAS_MODULE = 'HOSTPOOL_RAS_MODULE'
ENV_STICKY_FAILURE = 'HOSTPOOL_STICKY_FAILURE'
ENV_MAX_NODES = 'HOSTPOOL_MAX_NODES'
ENV_NODENAME = 'HOSTPOOL_NODENAME'

# Scheduler environments
SLURM_NODELIST_VARS = ('SLURM_NODELIST', 'SLURM_JOB_NODELIST')
SLURM_CPUS_PER_NODE = 'SLURM_JOB_CPUS_PER_NODE'
SLURM_CPUS_ON_NODE = 'SLURM_CPUS_ON_NODE'
PBS_NODEFILE = 'PBS_NODEFILE'
RAY_ADDRESS = 'RAY_ADDRESS'

MODULE_NONE = 'none'
MODULE_PRIORITY = ('slurm', 'pbs', 'ray')

TRUTHY = {'1', 'true', 'yes', 'on'}

# Seconds to wait for ``scontrol show hostnames``.
SCONTROL_TIMEOUT = 10

SESSION_DIR_PREFIX = 'hostpool-sessions'
