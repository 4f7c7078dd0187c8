from .email import ResendMailer, render_license_email

__all__ = ["ResendMailer", "render_license_email"]
