"""
Mirror Operations — Keep local bare mirrors in step with source and destination.

This package discovers the mirrors in a workspace, fetches them from their
source network, and pushes them to their destination network, provisioning
file-based destinations on the way.
"""
