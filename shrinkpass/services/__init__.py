"""
Services Package for shrinkpass.

The service layer sits between the pipeline (which files, in which order) and
the domain (bitrate arithmetic, probing, job scoping):

- **Encoding Services (`Encoder`, `X264Encoder`, `X265Encoder`):**
  Run the two-pass encode of one file and commit it in place.

- **File Processing Service (`ProcessVideoFiles`):**
  Discovers the candidate files under the target directory.

- **Logging Service (`SuccessLog`, `ErrorLog`):**
  Writes the YAML success report and the plain-text error report.
"""
