from rest_framework.throttling import SimpleRateThrottle


class IPScopedThrottle(SimpleRateThrottle):
    """
    Per-IP throttle for the unauthenticated auth endpoints.
    Scope name must exist in DEFAULT_THROTTLE_RATES.
    """

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)  # IP address
        if not ident:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}


class LoginThrottle(IPScopedThrottle):
    scope = "login"


class RegisterThrottle(IPScopedThrottle):
    scope = "register"


class OTPVerifyThrottle(IPScopedThrottle):
    scope = "otp-verify"


class OTPResendThrottle(IPScopedThrottle):
    scope = "otp-resend"


class PasswordResetThrottle(IPScopedThrottle):
    scope = "password-reset"


class PasswordResetConfirmThrottle(IPScopedThrottle):
    scope = "password-reset-confirm"
