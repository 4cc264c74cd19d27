"""Sign in with Scratch Auth and keep the session in a signed JWT cookie."""
