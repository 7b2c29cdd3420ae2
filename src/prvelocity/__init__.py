"""Azure DevOps pull-request velocity and impact analytics."""
