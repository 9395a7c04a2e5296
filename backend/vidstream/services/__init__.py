"""Service layer.

Layout
------
- ``_shared``: base service, Unit of Work helpers, domain errors and ports.
- ``auth``: :class:`~vidstream.services.auth.service.AuthService`, the
  register/login/logout/refresh/change-password session lifecycle.
- ``identity``: :class:`~vidstream.services.identity.service.IdentityService`,
  account self-service for an authenticated user.
- ``channels``: :class:`~vidstream.services.channels.service.ChannelService`,
  public channel profiles with subscription counts.

Import services from their subpackages; this package initialiser stays empty
so that infrastructure adapters can import the ports without pulling in the
models.
"""
