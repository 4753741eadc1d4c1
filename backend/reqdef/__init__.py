"""OpenIoT request definition - typed node-graph application designer."""
