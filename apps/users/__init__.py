"""Users app package.

Custom email-login user model with identity verification (KYC) state.
Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL.
"""
