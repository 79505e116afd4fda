from hy2config.fmt.profile import ConnectionProfile
from hy2config.fmt.renderer import render_acl_fragment, render_config
from hy2config.fmt.validator import ProfileValidationResult, validate_profile, validate_server_port

__all__ = [
    "ConnectionProfile",
    "ProfileValidationResult",
    "render_acl_fragment",
    "render_config",
    "validate_profile",
    "validate_server_port",
]
