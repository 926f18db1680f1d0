# ==============================================
# Clone Fields
# ==============================================
#
# Package Structure (4 Topics + Service):
#
# clone_fields/
# ├── schema/           # Topic 1: Field definitions, value trees, schema providers
# ├── detection/        # Topic 2: Discover fields on a record, presence & statistics
# ├── cloning/          # Topic 3: Copy field values source → target
# ├── backup/           # Topic 4: Snapshots of target values, restore & retention
# ├── storage/          # MySQL + MongoDB client wrappers
# ├── config.py         # Configuration management
# ├── transport.py      # Request decoding / response encoding
# ├── clone_service.py  # Composition root, request-level handlers
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
