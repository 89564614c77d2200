"""VPN IP tracker - reports VPN tunnel addresses to a remote endpoint."""

__version__ = "0.1.0"

APP_NAME = "vpn-ip-tracker"
