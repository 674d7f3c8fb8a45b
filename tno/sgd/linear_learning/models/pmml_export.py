"""
Export of generalized linear regression models to PMML 4.2.
"""
from xml.etree import ElementTree

from tno.sgd.linear_learning.models.linear_model import GeneralizedLinearModel

PMML_NAMESPACE = "http://www.dmg.org/PMML-4_2"
PMML_VERSION = "4.2"
TARGET_FIELD = "target"


def _field_name(index: int) -> str:
    return f"field_{index}"


def to_pmml(model: GeneralizedLinearModel, description: str) -> str:
    """
    Describe a linear regression model as a PMML RegressionModel.

    Feature $i$ is called ``field_i``, the predicted value ``target``. The
    regression table holds one numeric predictor per weight and the
    intercept.

    :param model: Model to export
    :param description: Human-readable description of the model
    :return: PMML document
    """
    pmml = ElementTree.Element(
        "PMML", {"version": PMML_VERSION, "xmlns": PMML_NAMESPACE}
    )
    header = ElementTree.SubElement(pmml, "Header", {"description": description})
    ElementTree.SubElement(header, "Application", {"name": "tno.sgd.linear_learning"})

    fields = [_field_name(index) for index in range(model.num_features)]

    data_dictionary = ElementTree.SubElement(
        pmml, "DataDictionary", {"numberOfFields": str(len(fields) + 1)}
    )
    for name in fields + [TARGET_FIELD]:
        ElementTree.SubElement(
            data_dictionary,
            "DataField",
            {"name": name, "optype": "continuous", "dataType": "double"},
        )

    regression_model = ElementTree.SubElement(
        pmml,
        "RegressionModel",
        {
            "modelName": description,
            "functionName": "regression",
            "normalizationMethod": "none",
        },
    )
    mining_schema = ElementTree.SubElement(regression_model, "MiningSchema")
    for name in fields:
        ElementTree.SubElement(
            mining_schema, "MiningField", {"name": name, "usageType": "active"}
        )
    ElementTree.SubElement(
        mining_schema, "MiningField", {"name": TARGET_FIELD, "usageType": "target"}
    )

    regression_table = ElementTree.SubElement(
        regression_model, "RegressionTable", {"intercept": repr(model.intercept)}
    )
    for name, coefficient in zip(fields, model.weights.tolist()):
        ElementTree.SubElement(
            regression_table,
            "NumericPredictor",
            {"name": name, "exponent": "1", "coefficient": repr(coefficient)},
        )
    return ElementTree.tostring(pmml, encoding="unicode")
