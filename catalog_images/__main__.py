import sys

from catalog_images.pipeline import main

sys.exit(main())
