"""leavedesk: leave management service."""
