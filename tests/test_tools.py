import asyncio

from mcp.server.fastmcp import FastMCP

from mapchat.config import Config
from mapchat.tools.tool_registry import register_all_tools


def _tools():
    app = FastMCP("mapchat-test")
    register_all_tools(app)
    return {tool.name: tool for tool in asyncio.run(app.list_tools())}


def test_all_tools_registered():
    assert set(_tools()) == {
        "nominatim_search",
        "foursquare_by_place",
        "tripadvisor_by_place",
    }


def test_nominatim_schema():
    schema = _tools()["nominatim_search"].inputSchema
    assert schema["required"] == ["query"]
    assert schema["properties"]["query"]["minLength"] == 2
    assert schema["properties"]["limit"]["minimum"] == 1
    assert schema["properties"]["limit"]["maximum"] == 10
    assert schema["properties"]["polygon"]["default"] is True


def test_foursquare_schema():
    schema = _tools()["foursquare_by_place"].inputSchema
    props = schema["properties"]
    assert schema["required"] == ["place"]
    assert props["query"]["default"] == "restaurants"
    assert (props["radius_km"]["minimum"], props["radius_km"]["maximum"]) == (1, 5)
    assert (props["limit"]["minimum"], props["limit"]["maximum"]) == (1, 20)


def test_tripadvisor_schema_has_category_enum():
    schema = _tools()["tripadvisor_by_place"].inputSchema
    assert set(schema["required"]) == {"place", "category"}
    assert schema["properties"]["category"]["enum"] == ["hotels", "restaurants", "attractions"]


def test_descriptions_guide_tool_choice():
    tools = _tools()
    assert "Nominatim" in tools["nominatim_search"].description
    assert "Foursquare" in tools["foursquare_by_place"].description


def test_validate_tool_params():
    assert Config.validate_tool_params("nominatim_search", {}) == [
        "Missing required field: query"
    ]
    assert Config.validate_tool_params("foursquare_by_place", {"place": "Seoul"}) == []
    assert Config.validate_tool_params("tripadvisor_by_place", {"place": "Seoul"}) == [
        "Missing required field: category"
    ]
    assert Config.validate_tool_params("nominatim_search", "query") == [
        "Parameters must be a dictionary"
    ]
