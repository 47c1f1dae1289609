"""Per-source field mapping rule tables.

Each table lists, for every canonical field, the source keys to try in
priority order and the coercion applied to the first value found.
"""

from __future__ import annotations

from transforms.field_mapping import FieldRule, RuleSet

_COMMON_DATE_FIELDS = ("date", "report_date", "reporting_date", "pubDate", "timestamp")

CONFLICT_RULES = RuleSet(
    name="conflict",
    category="conflict",
    date_fields=("event_date",) + _COMMON_DATE_FIELDS + ("year",),
    location_fields=("location", "location_name", "admin1", "region", "governorate"),
    metrics=(
        FieldRule("fatalities", ("fatalities", "killed", "deaths", "dead", "casualties")),
        FieldRule("injuries", ("injuries", "injured", "wounded")),
    ),
    attributes=(
        FieldRule(
            "event_type",
            ("event_type", "eventType", "type", "incident_type", "incidentType"),
            kind="text",
        ),
        FieldRule("actor1", ("actor1", "perpetrator", "attacker"), kind="text"),
        FieldRule("actor2", ("actor2", "target", "victim"), kind="text"),
        FieldRule(
            "description",
            ("notes", "description", "event_description", "details", "title"),
            kind="text",
        ),
    ),
)

INFRASTRUCTURE_RULES = RuleSet(
    name="infrastructure",
    category="infrastructure",
    date_fields=("report_date", "date", "reporting_date"),
    default_location="Gaza Strip",
    metrics=(
        FieldRule("housing_destroyed", ("housing_units_destroyed", "residential_destroyed")),
        FieldRule("housing_damaged", ("housing_units_damaged", "residential_damaged")),
        FieldRule("government_buildings_destroyed", ("government_buildings_destroyed",)),
        FieldRule("schools_destroyed", ("schools_destroyed", "educational_buildings_destroyed")),
        FieldRule("schools_damaged", ("schools_damaged", "educational_buildings_damaged")),
        FieldRule(
            "mosques_destroyed", ("mosques_destroyed", "places_of_worship_mosques_destroyed")
        ),
        FieldRule("churches_damaged", ("churches_damaged", "places_of_worship_churches_destroyed")),
        FieldRule("hospitals_out_of_service", ("hospitals_out_of_service",)),
        FieldRule("roads_destroyed_km", ("road_network_destroyed_km",), kind="amount"),
        FieldRule("water_wells_destroyed", ("water_wells_destroyed",)),
    ),
    attributes=(
        FieldRule("structure_type", ("structure_type", "type"), kind="text"),
        FieldRule("status", ("status",), kind="text"),
    ),
)

WATER_RULES = RuleSet(
    name="water",
    category="water",
    date_fields=("date", "reference_period_end", "reference_period_start", "last_updated"),
    location_fields=("location_name", "admin1_name", "location", "admin2_name"),
    metrics=(
        FieldRule("value", ("value", "metric_value"), kind="amount"),
        FieldRule("population", ("population", "population_served")),
    ),
    attributes=(
        FieldRule("indicator_code", ("indicator_code",), kind="text"),
        FieldRule("indicator_name", ("indicator_name", "indicator"), kind="text"),
        FieldRule("indicator_description", ("indicator_description",), kind="text"),
        FieldRule("unit", ("unit",), kind="text"),
        FieldRule("dataset", ("dataset_name", "dataset_hdx_title"), kind="text"),
        FieldRule("provider", ("provider_name", "provider"), kind="text"),
    ),
)

WHO_HEALTH_RULES = RuleSet(
    name="who-health",
    category="health",
    date_fields=("year_(display)", "startyear", "endyear", "date", "year"),
    location_fields=("country_(display)", "location", "location_name"),
    default_location="Palestine",
    metrics=(
        FieldRule("value", ("numeric", "value"), kind="amount"),
        FieldRule("low", ("low",), kind="amount"),
        FieldRule("high", ("high",), kind="amount"),
    ),
    attributes=(
        FieldRule("indicator_code", ("gho_(code)", "indicator_code"), kind="text"),
        FieldRule("indicator_name", ("gho_(display)", "indicator_name", "indicator"), kind="text"),
        FieldRule("indicator_url", ("gho_(url)",), kind="text"),
        FieldRule("dimension_type", ("dimension_(type)",), kind="text"),
        FieldRule("dimension_name", ("dimension_(name)", "dimension_(code)"), kind="text"),
        FieldRule("country_code", ("country_(code)",), kind="text"),
    ),
)

_UNRWA_ADMIN1 = ("governorate", "admin1")

REFUGEE_RULES = RuleSet(
    name="unrwa-refugee",
    category="refugee",
    date_fields=("date", "reporting_date", "year"),
    location_fields=("location", "field", "area", "governorate"),
    admin1_fields=_UNRWA_ADMIN1,
    metrics=(
        FieldRule(
            "registered_refugees",
            ("registered_refugees", "total_refugees", "population"),
        ),
        FieldRule("families", ("families", "households")),
        FieldRule("males", ("males",)),
        FieldRule("females", ("females",)),
        FieldRule("children", ("children",)),
    ),
    attributes=(
        FieldRule("camp_name", ("camp", "camp_name"), kind="text"),
        FieldRule("unrwa_field", ("field", "area_of_operations"), kind="text"),
        FieldRule("camp_type", ("camp_type",), kind="text"),
        FieldRule("registration_status", ("status",), kind="text"),
    ),
)

DISPLACEMENT_RULES = RuleSet(
    name="unrwa-displacement",
    category="displacement",
    date_fields=("date", "reporting_date"),
    location_fields=("location", "shelter_location", "governorate"),
    admin1_fields=_UNRWA_ADMIN1,
    metrics=(
        FieldRule("displaced_persons", ("displaced", "idps", "total_displaced")),
        FieldRule("families", ("families", "households")),
        FieldRule("in_shelters", ("in_shelters", "sheltered")),
        FieldRule("in_host_families", ("host_families", "in_host_families")),
        FieldRule("shelter_capacity", ("capacity", "shelter_capacity")),
        FieldRule("shelter_occupancy", ("occupancy", "shelter_occupancy"), kind="amount"),
    ),
    attributes=(
        FieldRule("displacement_reason", ("reason", "displacement_reason"), kind="text"),
        FieldRule("shelter_type", ("shelter_type",), kind="text"),
    ),
)

EDUCATION_RULES = RuleSet(
    name="unrwa-education",
    category="education",
    date_fields=("date", "academic_year", "reporting_date"),
    location_fields=("location", "school_location", "governorate"),
    admin1_fields=_UNRWA_ADMIN1,
    metrics=(
        FieldRule("schools", ("schools", "facilities")),
        FieldRule("students", ("students", "enrollment")),
        FieldRule("teachers", ("teachers", "staff")),
        FieldRule("classrooms", ("classrooms",)),
    ),
    attributes=(
        FieldRule("facility_type", ("facility_type",), kind="text"),
        FieldRule("education_level", ("level", "education_level"), kind="text"),
        FieldRule("operational_status", ("status",), kind="text"),
    ),
)

UNRWA_HEALTH_RULES = RuleSet(
    name="unrwa-health",
    category="health",
    date_fields=("date", "reporting_date"),
    location_fields=("location", "facility_location", "governorate"),
    admin1_fields=_UNRWA_ADMIN1,
    metrics=(
        FieldRule("health_centers", ("health_centers", "health_centres", "facilities")),
        FieldRule("patients", ("patients", "consultations")),
        FieldRule("medical_staff", ("staff", "doctors")),
        FieldRule("services_provided", ("services",)),
    ),
    attributes=(
        FieldRule("facility_type", ("facility_type",), kind="text"),
        FieldRule("operational_status", ("status",), kind="text"),
    ),
)

EMERGENCY_RULES = RuleSet(
    name="unrwa-emergency",
    category="emergency",
    date_fields=("date", "reporting_date"),
    location_fields=("location", "area", "governorate"),
    admin1_fields=_UNRWA_ADMIN1,
    metrics=(
        FieldRule("beneficiaries", ("beneficiaries", "people_reached")),
        FieldRule("food_assistance", ("food_assistance",)),
        FieldRule("cash_assistance", ("cash_assistance",), kind="amount"),
        FieldRule("shelter_assistance", ("shelter_assistance",)),
        FieldRule("people_in_need", ("people_in_need",)),
        FieldRule("people_targeted", ("people_targeted",)),
    ),
    attributes=(
        FieldRule("sector", ("sector",), kind="text"),
        FieldRule("assistance_type", ("assistance_type",), kind="text"),
    ),
)
