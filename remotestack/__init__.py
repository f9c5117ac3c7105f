"""remotestack: packages OAM workloads and traits into KubernetesApplications."""

__version__ = "0.1.0"
