"""Users app package.

Email-login user with a booking role (player, venue owner, admin). Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
