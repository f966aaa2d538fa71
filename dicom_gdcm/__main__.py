import sys

from dicom_gdcm.cli.main import main

sys.exit(main())
