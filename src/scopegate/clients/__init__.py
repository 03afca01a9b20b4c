"""Cluster client layer — One client per Elasticsearch protocol generation.

Built-in generations, each on its official client library:
  - 7: Elasticsearch 7.x via ``elasticsearch7``
  - 8: Elasticsearch 8.x via ``elasticsearch8``
  - 9: Elasticsearch 9.x via ``elasticsearch``

Subclass ``ClusterClient`` and register it on a ``ClientRegistry`` to add one.
"""
