"""Core types shared by the control service client and the provisioner."""
