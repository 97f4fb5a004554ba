"""Route access rules for the marketplace's pages."""

from urllib.parse import urlencode

AUTH_ROUTES = ("/login", "/register", "/apply-seller")
CUSTOMER_ROUTES = ("/dashboard", "/bookings", "/tickets", "/profile")
SELLER_ROUTE_PREFIX = "/seller"
AUTHENTICATED_HOME = "/dashboard"
LOGIN_ROUTE = "/login"


def is_protected_route(path: str) -> bool:
    return any(path.startswith(route) for route in CUSTOMER_ROUTES) or path.startswith(SELLER_ROUTE_PREFIX)


def guard_route(path: str, is_authenticated: bool) -> str | None:
    """Where to redirect a request for `path`, or None to let it through.

    Signed-in users are sent away from the login and sign-up pages; anonymous
    users asking for a customer or seller page are sent to login with the page
    they wanted in `redirect`.
    """
    if path in AUTH_ROUTES and is_authenticated:
        return AUTHENTICATED_HOME
    if is_protected_route(path) and not is_authenticated:
        return f"{LOGIN_ROUTE}?{urlencode({'redirect': path})}"
    return None
