"""Transport credentials handed to git child processes."""
from dataclasses import dataclass, field
from typing import Dict, Optional

_USERNAME_VAR = "GPK_CREDENTIAL_USERNAME"
_PASSWORD_VAR = "GPK_CREDENTIAL_PASSWORD"

# Inline helper that answers "get" requests from the two private variables.
# The secret itself never appears on a command line.
_INLINE_HELPER = (
    '!f() { test "$1" = get && '
    f'printf "username=%s\\npassword=%s\\n" "${_USERNAME_VAR}" "${_PASSWORD_VAR}"; }}; f'
)


@dataclass(frozen=True)
class Credentials:
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @property
    def anonymous(self) -> bool:
        return not (self.username and self.password)

    @classmethod
    def default(cls) -> "Credentials":
        return cls()

    def to_git_env(self) -> Dict[str, str]:
        """Environment for a git process that should use these credentials."""
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if self.anonymous:
            return env

        env.update({
            "GIT_CONFIG_COUNT": "2",
            # An empty value resets the helper list configured by the user
            "GIT_CONFIG_KEY_0": "credential.helper",
            "GIT_CONFIG_VALUE_0": "",
            "GIT_CONFIG_KEY_1": "credential.helper",
            "GIT_CONFIG_VALUE_1": _INLINE_HELPER,
            _USERNAME_VAR: self.username,
            _PASSWORD_VAR: self.password,
        })
        return env
