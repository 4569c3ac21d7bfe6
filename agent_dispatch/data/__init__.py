"""
Sample records served by the recruiter agents' tools.
"""
