__version__ = "0.3.0"
__app_name__ = "hy2config"
__app_description__ = "Profile and routing-rule manager for a Hysteria 2 client"

__all__ = [
    "__app_description__",
    "__app_name__",
    "__version__",
]
