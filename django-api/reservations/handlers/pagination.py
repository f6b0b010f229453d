"""Page-number pagination over pages already cut by a store."""

from rest_framework.exceptions import NotFound
from rest_framework.pagination import PageNumberPagination
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.utils.urls import remove_query_param, replace_query_param

from reservations.stores.interfaces import Page, PageRequest


class StorePagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100

    def page_request(self, request: Request) -> PageRequest:
        try:
            number = int(request.query_params.get(self.page_query_param, 1))
        except ValueError:
            raise NotFound("Invalid page.")
        if number < 1:
            raise NotFound("Invalid page.")
        return PageRequest(number=number, size=self.get_page_size(request))

    def response(self, request: Request, page: Page, results: list) -> Response:
        url = request.build_absolute_uri()
        next_url = previous_url = None
        if page.has_next:
            next_url = replace_query_param(url, self.page_query_param, page.request.number + 1)
        if page.request.number > 1:
            if page.request.number == 2:
                previous_url = remove_query_param(url, self.page_query_param)
            else:
                previous_url = replace_query_param(
                    url, self.page_query_param, page.request.number - 1
                )
        return Response(
            {
                "count": page.total,
                "next": next_url,
                "previous": previous_url,
                "results": results,
            }
        )
