"""Labeled queries for the initial offline training run."""

TrainingSample = tuple[str, str]

TRAINING_SAMPLES: tuple[TrainingSample, ...] = (
    ("who owns intel", "account_ownership"),
    ("who is the owner of boeing", "account_ownership"),
    ("account owner for microsoft", "account_ownership"),
    ("does boeing exist", "account_exists"),
    ("is intel in crm", "account_exists"),
    ("do we have this company", "account_exists"),
    ("tell me about boeing", "account_context"),
    ("what do we know about intel", "account_context"),
    ("give me context on this account", "account_context"),
    ("show me intel opportunities", "account_opportunities"),
    ("what opps does boeing have", "account_opportunities"),
    ("deals at microsoft", "account_opportunities"),
    ("late stage pipeline", "late_stage_pipeline"),
    ("show me stage 3 and 4", "late_stage_pipeline"),
    ("proposal and pilot deals", "late_stage_pipeline"),
    ("weighted pipeline", "weighted_pipeline"),
    ("what is our forecast", "weighted_pipeline"),
    ("finance weighted", "weighted_pipeline"),
    ("contracting pipeline", "product_pipeline"),
    ("compliance opportunities", "product_pipeline"),
    ("m&a deals", "product_pipeline"),
    ("when is intel loi", "loi_date"),
    ("target close date for boeing", "loi_date"),
    ("expected sign date", "loi_date"),
    ("last meeting with intel", "last_meeting"),
    ("when did we meet boeing", "last_meeting"),
    ("recent call with", "last_meeting"),
    ("legal contacts at boeing", "contacts"),
    ("who have we met with", "contacts"),
    ("decision makers at intel", "contacts"),
    ("create new account", "create_account"),
    ("add company to crm", "create_account"),
    ("register new prospect", "create_account"),
    ("create opportunity for boeing", "create_opportunity"),
    ("add new deal", "create_opportunity"),
    ("start tracking opportunity", "create_opportunity"),
    ("generate pipeline report", "export_pipeline"),
    ("excel export", "export_pipeline"),
    ("download pipeline spreadsheet", "export_pipeline"),
)
