"""
Pipeline errors.

Every failure in the forecast pipeline propagates to the HTTP layer,
which maps it to a status code. Nothing here is ever turned into an
empty result.
"""


class WeatherError(RuntimeError):
    """Base class for forecast lookup failures."""
    pass


class ProviderUnavailable(WeatherError):
    """The forecast provider returned no usable payload."""
    pass


class MalformedProviderPayload(WeatherError):
    """A provider entry could not be mapped to a forecast record."""
    pass


class StoreUnavailable(WeatherError):
    """A read or write against the forecast table failed."""
    pass
