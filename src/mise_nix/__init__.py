"""mise-nix: build-once, register-once resolution of Nix flake references."""
