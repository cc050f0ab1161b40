"""Mutation resolvers: authorized operations returning Ok | Err unions."""
