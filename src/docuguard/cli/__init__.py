"""DocuGuard command line interface."""
