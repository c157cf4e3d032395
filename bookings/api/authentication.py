from rest_framework import authentication


class SessionAuthentication(authentication.SessionAuthentication):
    """
    Session auth that reports a missing session as 401.

    DRF only answers 401 when the first authenticator supplies a
    WWW-Authenticate challenge; the stock session class does not, which
    turns every unauthenticated request into a 403.
    """

    def authenticate_header(self, request):
        return 'Session realm="api"'
