"""Built-in operation catalog.

Schemas for the Cloud sample operations samplectl ships with. Each one
names its resource template, so a malformed resource path is rejected
before any transport call.
"""

from __future__ import annotations

import pluggy

from samplectl.domain import resources
from samplectl.domain.schema import (
    OperationKind,
    OperationSchema,
    boolean,
    enum,
    integer,
    message,
    string,
)

hookimpl = pluggy.HookimplMarker("samplectl")

_INPUT_TYPES = ("RTMP_PUSH", "SRT_PUSH")
_DOCUMENT_TYPES = ("PLAIN_TEXT", "HTML")
_ENCODING_TYPES = ("NONE", "UTF8", "UTF16", "UTF32")
_LIKELIHOODS = ("VERY_UNLIKELY", "UNLIKELY", "POSSIBLE", "LIKELY", "VERY_LIKELY")
_METRIC_AGGREGATIONS = ("TOTAL", "MINIMUM", "MAXIMUM", "COUNT")
_DATABASE_DIALECTS = ("GOOGLE_STANDARD_SQL", "POSTGRESQL")
_RELATIONAL_OPERATORS = (
    "EQUAL_TO",
    "NOT_EQUAL_TO",
    "GREATER_THAN",
    "LESS_THAN",
    "GREATER_THAN_OR_EQUALS",
    "LESS_THAN_OR_EQUALS",
    "EXISTS",
)
_SOURCE_FORMATS = ("CSV", "NEWLINE_DELIMITED_JSON", "AVRO", "PARQUET")
_WRITE_DISPOSITIONS = ("WRITE_APPEND", "WRITE_TRUNCATE", "WRITE_EMPTY")
_SCHEMA_UPDATE_OPTIONS = ("ALLOW_FIELD_ADDITION", "ALLOW_FIELD_RELAXATION")

_DOCUMENT = message(
    "document",
    (
        string("content"),
        string("gcs_content_uri"),
        enum("type", _DOCUMENT_TYPES, default="PLAIN_TEXT"),
    ),
    required=True,
)

OPERATIONS: tuple[OperationSchema, ...] = (
    # --- Live Stream ---
    OperationSchema(
        name="livestream.listChannels",
        kind=OperationKind.LISTING,
        resource_template=resources.LOCATION.pattern,
        fields=(integer("page_size"), string("filter")),
        columns=("name", "state"),
        description="List channels in a location.",
    ),
    OperationSchema(
        name="livestream.listInputs",
        kind=OperationKind.LISTING,
        resource_template=resources.LOCATION.pattern,
        fields=(integer("page_size"),),
        columns=("name", "type"),
        description="List inputs in a location.",
    ),
    OperationSchema(
        name="livestream.getInput",
        resource_template=resources.INPUT.pattern,
        description="Get one input.",
    ),
    OperationSchema(
        name="livestream.createInput",
        kind=OperationKind.LONG_RUNNING,
        resource_template=resources.LOCATION.pattern,
        fields=(
            string("input_id", required=True),
            message(
                "input",
                (enum("type", _INPUT_TYPES, default="RTMP_PUSH"),),
                default={},
            ),
        ),
        description="Create an input endpoint.",
    ),
    OperationSchema(
        name="livestream.createAsset",
        kind=OperationKind.LONG_RUNNING,
        resource_template=resources.LOCATION.pattern,
        fields=(
            string("asset_id", required=True),
            message(
                "asset",
                (message("video", (string("uri", required=True),)),),
                required=True,
            ),
        ),
        description="Create a video asset from a Cloud Storage URI.",
    ),
    # --- Transcoder ---
    OperationSchema(
        name="transcoder.deleteJob",
        resource_template=resources.JOB.pattern,
        description="Delete a transcoding job.",
    ),
    OperationSchema(
        name="transcoder.createJob",
        resource_template=resources.LOCATION.pattern,
        fields=(
            message(
                "job",
                (
                    string("input_uri", required=True),
                    string("output_uri", required=True),
                    string("template_id", default="preset/web-hd"),
                ),
                required=True,
            ),
        ),
        description="Create a transcoding job from a preset template.",
    ),
    # --- Natural Language ---
    OperationSchema(
        name="language.analyzeEntities",
        fields=(
            _DOCUMENT,
            enum("encoding_type", _ENCODING_TYPES),
        ),
        columns=("name", "type", "salience"),
        description="Find named entities in a document.",
    ),
    OperationSchema(
        name="language.analyzeEntitySentiment",
        fields=(
            _DOCUMENT,
            enum("encoding_type", _ENCODING_TYPES),
        ),
        columns=("name", "type", "salience", "sentiment"),
        description="Find entities and the sentiment expressed toward each.",
    ),
    OperationSchema(
        name="language.analyzeSyntax",
        fields=(
            _DOCUMENT,
            enum("encoding_type", _ENCODING_TYPES),
        ),
        description="Tokenize a document and tag parts of speech.",
    ),
    # --- Data Loss Prevention ---
    OperationSchema(
        name="dlp.inspectContent",
        resource_template=resources.LOCATION.pattern,
        fields=(
            message("item", (string("value", required=True),), required=True),
            message(
                "inspect_config",
                (
                    string("info_types", repeated=True),
                    enum("min_likelihood", _LIKELIHOODS, default="POSSIBLE"),
                    boolean("include_quote", default=True),
                ),
            ),
        ),
        columns=("quote", "info_type", "likelihood"),
        description="Inspect a string for sensitive data.",
    ),
    OperationSchema(
        name="dlp.deidentifyContent",
        resource_template=resources.LOCATION.pattern,
        fields=(
            message(
                "item",
                (
                    message(
                        "table",
                        (
                            message(
                                "headers",
                                (string("name", required=True),),
                                repeated=True,
                                required=True,
                            ),
                            message(
                                "rows",
                                (
                                    message(
                                        "values",
                                        (string("string_value"), integer("integer_value")),
                                        repeated=True,
                                    ),
                                ),
                                repeated=True,
                            ),
                        ),
                        required=True,
                    ),
                ),
                required=True,
            ),
            message(
                "deidentify_config",
                (
                    string("info_types", repeated=True, default=("PERSON_NAME",)),
                    string("transform_fields", repeated=True),
                    message(
                        "condition",
                        (
                            string("field", required=True),
                            enum("operator", _RELATIONAL_OPERATORS, default="EQUAL_TO"),
                            string("value"),
                        ),
                    ),
                ),
                default={},
            ),
        ),
        description="De-identify a table, optionally only rows matching a condition.",
    ),
    # --- Analytics Data ---
    OperationSchema(
        name="analyticsdata.runReport",
        resource_template=resources.PROPERTY.pattern,
        fields=(
            message("dimensions", (string("name", required=True),), repeated=True),
            message("metrics", (string("name", required=True),), repeated=True, required=True),
            message(
                "date_ranges",
                (string("start_date", required=True), string("end_date", required=True)),
                repeated=True,
            ),
            enum("metric_aggregations", _METRIC_AGGREGATIONS, repeated=True),
        ),
        description="Run a GA4 report.",
    ),
    # --- Security Command Center ---
    OperationSchema(
        name="securitycenter.listNotificationConfigs",
        kind=OperationKind.LISTING,
        resource_template=resources.ORGANIZATION.pattern,
        fields=(integer("page_size"),),
        columns=("name", "description", "pubsub_topic"),
        description="List notification configs of an organization.",
    ),
    # --- Spanner ---
    OperationSchema(
        name="spanner.createDatabase",
        kind=OperationKind.LONG_RUNNING,
        resource_template=resources.INSTANCE.pattern,
        fields=(
            string("create_statement", required=True),
            string("extra_statements", repeated=True),
            enum("database_dialect", _DATABASE_DIALECTS, default="GOOGLE_STANDARD_SQL"),
        ),
        description="Create a database with optional DDL.",
    ),
    OperationSchema(
        name="spanner.executeSql",
        kind=OperationKind.LISTING,
        resource_template=resources.DATABASE.pattern,
        fields=(string("sql", required=True), integer("page_size")),
        description="Run a SQL statement, including DML with THEN RETURN, and list the rows.",
    ),
    # --- BigQuery ---
    OperationSchema(
        name="bigquery.insertJob",
        kind=OperationKind.LONG_RUNNING,
        resource_template=resources.PROJECT.pattern,
        fields=(
            message(
                "load",
                (
                    message(
                        "destination_table",
                        (
                            string("dataset_id", required=True),
                            string("table_id", required=True),
                        ),
                        required=True,
                    ),
                    string("source_uris", repeated=True, required=True),
                    enum("source_format", _SOURCE_FORMATS, default="CSV"),
                    enum("write_disposition", _WRITE_DISPOSITIONS, default="WRITE_APPEND"),
                    enum("schema_update_options", _SCHEMA_UPDATE_OPTIONS, repeated=True),
                ),
                required=True,
            ),
        ),
        description="Run a load job that appends files to a table.",
    ),
    # --- Pub/Sub ---
    OperationSchema(
        name="pubsub.publish",
        resource_template=resources.TOPIC.pattern,
        fields=(
            message(
                "messages",
                (string("data", required=True), string("ordering_key")),
                repeated=True,
                required=True,
            ),
        ),
        description="Publish messages to a topic.",
    ),
)


class BuiltinOperationsPlugin:
    """Contributes :data:`OPERATIONS` to the registry."""

    @hookimpl
    def register_operations(self) -> list[OperationSchema]:
        return list(OPERATIONS)
