"""
Database Schema Reference
=========================

This file provides a quick reference for all database tables and columns.
For actual SQLAlchemy models, see: mediacost/db/models.py

"""

# ============================================================================
# MEDIA_METADATA - Extracted media metadata (read-only to this service)
# ============================================================================
#
# | Column       | Type          | Constraints                    |
# |--------------|---------------|--------------------------------|
# | id           | INTEGER       | PRIMARY KEY                    |
# | contenthash  | VARCHAR(40)   | NOT NULL, UNIQUE, INDEX        |
# | duration     | FLOAT         | NOT NULL (seconds)             |
# | width        | INTEGER       | NULLABLE                       |
# | height       | INTEGER       | NULLABLE (0/NULL = no video)   |
# | videostreams | INTEGER       | NOT NULL                       |
# | audiostreams | INTEGER       | NOT NULL                       |
# | size         | INTEGER       | NOT NULL (bytes)               |
# | metadata     | JSON          | NULLABLE ({"formatname": ...}) |
# | created_at   | TIMESTAMP(TZ) | DEFAULT now()                  |


# ============================================================================
# CONVERSIONS - Conversion of a media file (read-only to this service)
# ============================================================================
#
# | Column                  | Type          | Constraints            |
# |-------------------------|---------------|------------------------|
# | id                      | INTEGER       | PRIMARY KEY            |
# | pathnamehash            | VARCHAR(40)   | NOT NULL               |
# | contenthash             | VARCHAR(40)   | NOT NULL, INDEX        |
# | status                  | INTEGER       | NOT NULL               |
# | transcoder_status       | INTEGER       | NOT NULL               |
# | rekog_face_status       | INTEGER       | NOT NULL               |
# | rekog_moderation_status | INTEGER       | NOT NULL               |
# | rekog_label_status      | INTEGER       | NOT NULL               |
# | rekog_person_status     | INTEGER       | NOT NULL               |
# | transcribe_status       | INTEGER       | NOT NULL               |
# | timecreated             | TIMESTAMP(TZ) | DEFAULT now()          |
# | timecompleted           | TIMESTAMP(TZ) | NULLABLE               |
#
# Status codes:
#   3 file missing | 200 finished | 201 pending | 202 in progress
#   404 not found  | 500 error
#
# Relationships:
#   - presets: ONE-TO-MANY -> conversion_presets.convid (CASCADE DELETE)


# ============================================================================
# CONVERSION_PRESETS - Transcoding presets chosen per conversion
# ============================================================================
#
# | Column | Type         | Constraints                          |
# |--------|--------------|--------------------------------------|
# | id     | INTEGER      | PRIMARY KEY                          |
# | convid | INTEGER      | NOT NULL, FK(conversions.id), INDEX  |
# | preset | VARCHAR(255) | NOT NULL (MediaConvert preset name)  |


# ============================================================================
# FILES - File instances (read-only to this service)
# ============================================================================
#
# | Column       | Type          | Constraints                  |
# |--------------|---------------|------------------------------|
# | id           | INTEGER       | PRIMARY KEY                  |
# | contenthash  | VARCHAR(40)   | NOT NULL, INDEX              |
# | pathnamehash | VARCHAR(40)   | NOT NULL                     |
# | component    | VARCHAR(100)  | NOT NULL                     |
# | filearea     | VARCHAR(50)   | NOT NULL ('draft' = upload)  |
# | filename     | VARCHAR(255)  | NOT NULL ('.' = directory)   |
# | mimetype     | VARCHAR(100)  | NULLABLE                     |
# | filesize     | INTEGER       | NOT NULL                     |
# | timecreated  | TIMESTAMP(TZ) | DEFAULT now()                |


# ============================================================================
# REPORT_VALUES - Named scalar report values, one row per name
# ============================================================================
#
# | Column | Type         | Constraints              |
# |--------|--------------|--------------------------|
# | id     | INTEGER      | PRIMARY KEY              |
# | name   | VARCHAR(100) | NOT NULL, UNIQUE, INDEX  |
# | value  | TEXT         | NULLABLE                 |
#
# Names: totalfiles, audiofiles, videofiles, uniquemultimediaobjects,
#        metadataprocessedfiles, transcodedfiles, convertedcost, totalcost
# totalcost is NULL when no presets are configured (cannot calculate).


# ============================================================================
# REPORT_OVERVIEW - Per-file overview, replaced in full on every run
# ============================================================================
#
# | Column        | Type          | Constraints                         |
# |---------------|---------------|-------------------------------------|
# | id            | INTEGER       | PRIMARY KEY                         |
# | contenthash   | VARCHAR(40)   | NOT NULL, INDEX                     |
# | type          | VARCHAR(10)   | NOT NULL ('Video' | 'Audio')        |
# | format        | VARCHAR(100)  | NULLABLE                            |
# | resolution    | VARCHAR(50)   | NOT NULL ('1920 X 1080')            |
# | duration      | FLOAT         | NOT NULL (seconds, 3 decimals)      |
# | filesize      | INTEGER       | NOT NULL                            |
# | cost          | FLOAT         | NULLABLE (USD, 3 decimals)          |
# | status        | VARCHAR(20)   | NOT NULL, INDEX                     |
# | files         | INTEGER       | NOT NULL (instances of the content) |
# | timecreated   | TIMESTAMP(TZ) | NULLABLE                            |
# | timecompleted | TIMESTAMP(TZ) | NULLABLE                            |
#
# Status labels: 'Finished' | 'In Progress' | 'File Missing' | 'Error'
